from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Hashable, Iterator

from beanwire.descriptors import ConstructorDescriptor, TypeDescriptor, as_type_descriptor
from beanwire.exceptions import (
    BeanwireAmbiguousConstructorError,
    BeanwireNoEligibleConstructorError,
)
from beanwire.markers import Marker
from beanwire.policies import ConstructorTieBreak

logger = logging.getLogger(__name__)


class ResolutionCache:
    """Map type keys to their resolved constructor, computing each entry once.

    Entries are never evicted. Concurrent first-time lookups of the same key run
    the computation once and share its result. A computation that raises stores
    nothing, so the next lookup computes again. The per-key lock is released
    from the cache once its computation finishes, whether it stored an entry or
    raised.
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, ConstructorDescriptor] = {}
        self._key_locks: dict[Hashable, threading.Lock] = {}
        self._key_locks_lock = threading.Lock()

    def get(self, key: Hashable) -> ConstructorDescriptor | None:
        return self._entries.get(key)

    def get_or_compute(
        self,
        key: Hashable,
        compute: Callable[[], ConstructorDescriptor],
    ) -> ConstructorDescriptor:
        """Return the entry for ``key``, computing and storing it when absent."""
        cached = self._entries.get(key)
        if cached is not None:
            return cached

        key_lock = self._get_key_lock(key)
        with key_lock:
            # Callers that waited on the lock find the entry stored by the first one.
            cached = self._entries.get(key)
            if cached is not None:
                return cached
            try:
                resolved = compute()
                # A caller holding a lock dropped after a failure may race a new one.
                resolved = self._entries.setdefault(key, resolved)
            finally:
                self._drop_key_lock(key, key_lock)
        return resolved

    def _get_key_lock(self, key: Hashable) -> threading.Lock:
        """Get or create the lock guarding computation for ``key``.

        Locks are dropped after each computation, so lookup and creation
        happen under one guard.
        """
        with self._key_locks_lock:
            return self._key_locks.setdefault(key, threading.Lock())

    def _drop_key_lock(self, key: Hashable, key_lock: threading.Lock) -> None:
        with self._key_locks_lock:
            if self._key_locks.get(key) is key_lock:
                del self._key_locks[key]

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._entries))


def is_injection_candidate(constructor: ConstructorDescriptor) -> bool:
    """Return true when a constructor takes no parameters or is marked with ``@inject``."""
    return constructor.parameter_count == 0 or constructor.markers.has(Marker.INJECT)


class ConstructorResolver:
    """Select the constructor the container invokes to build a managed type.

    Constructors are ranked by parameter count, highest first. The first one
    that takes no parameters or carries ``@inject`` wins. Each resolver owns its
    ``ResolutionCache``; pass one in to share it between resolvers.

    Examples:
        .. code-block:: python

            resolver = ConstructorResolver()
            constructor = resolver.resolve_constructor(Service)
            assert constructor.name == "Service.__init__"

    """

    def __init__(
        self,
        cache: ResolutionCache | None = None,
        *,
        tie_break: ConstructorTieBreak = ConstructorTieBreak.FIRST_DECLARED,
    ) -> None:
        self.cache = cache if cache is not None else ResolutionCache()
        self.tie_break = tie_break

    def resolve_constructor(self, candidate: TypeDescriptor | type) -> ConstructorDescriptor:
        """Return the injection constructor of ``candidate``, resolving it on first use.

        Args:
            candidate: Type descriptor, or a runtime class described on the fly.

        Returns:
            The cached constructor descriptor. Repeated calls for the same type
            return the identical object.

        Raises:
            BeanwireNoEligibleConstructorError: If no constructor takes zero
                parameters and none is marked with ``@inject``.
            BeanwireAmbiguousConstructorError: If the tie-break policy is
                ``ConstructorTieBreak.ERROR`` and the choice is not unique.

        """
        descriptor = as_type_descriptor(candidate)
        return self.cache.get_or_compute(
            descriptor.key,
            lambda: self._select_constructor(descriptor),
        )

    def _select_constructor(self, descriptor: TypeDescriptor) -> ConstructorDescriptor:
        # sorted() is stable, so equal counts keep declaration order.
        ranked = sorted(
            descriptor.constructors(),
            key=lambda constructor: constructor.parameter_count,
            reverse=True,
        )
        for index, constructor in enumerate(ranked):
            if not is_injection_candidate(constructor):
                continue
            if self.tie_break is ConstructorTieBreak.ERROR:
                self._check_unique(descriptor, constructor, ranked[index + 1 :])
            logger.debug(
                "Resolved constructor for managed type: type=%s constructor=%s parameters=%d",
                descriptor.name,
                constructor.name,
                constructor.parameter_count,
            )
            return constructor

        raise BeanwireNoEligibleConstructorError(descriptor.name)

    def _check_unique(
        self,
        descriptor: TypeDescriptor,
        selected: ConstructorDescriptor,
        remaining: list[ConstructorDescriptor],
    ) -> None:
        rivals = [
            constructor
            for constructor in remaining
            if constructor.parameter_count == selected.parameter_count
            and is_injection_candidate(constructor)
        ]
        if rivals:
            raise BeanwireAmbiguousConstructorError(
                descriptor.name,
                [selected.name, *(rival.name for rival in rivals)],
            )


__all__ = ["ConstructorResolver", "ResolutionCache", "is_injection_candidate"]
