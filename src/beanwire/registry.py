from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Hashable, Iterator
from dataclasses import dataclass
from typing import Any, Literal, TypeVar, overload

from beanwire.descriptors import ConstructorDescriptor, TypeDescriptor, as_type_descriptor
from beanwire.policies import ConstructorTieBreak
from beanwire.resolution import ConstructorResolver
from beanwire.validators import ManagedTypeValidator

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ManagedTypeRegistration:
    """Accepted managed type and the constructor the container will invoke."""

    descriptor: TypeDescriptor
    constructor: ConstructorDescriptor

    @property
    def key(self) -> Hashable:
        return self.descriptor.key


class ManagedTypeRegistry:
    """Registration path that only admits valid managed types.

    Every candidate goes through ``ManagedTypeValidator`` before it is recorded.
    Errors raised by validation reach the caller unchanged and leave the
    registry untouched.

    Examples:
        .. code-block:: python

            registry = ManagedTypeRegistry()


            @registry.register
            class Service:
                def __init__(self) -> None: ...


            assert Service in registry

    """

    def __init__(
        self,
        resolver: ConstructorResolver | None = None,
        *,
        tie_break: ConstructorTieBreak = ConstructorTieBreak.FIRST_DECLARED,
    ) -> None:
        """Initialize a registry.

        Args:
            resolver: Resolver to share with other registries. A new one with
                ``tie_break`` is created when omitted.
            tie_break: Tie-break policy for a resolver created by the registry.

        """
        if resolver is None:
            resolver = ConstructorResolver(tie_break=tie_break)
        self.resolver = resolver
        self.validator = ManagedTypeValidator(self.resolver)
        self._registrations: dict[Hashable, ManagedTypeRegistration] = {}
        self._lock = threading.Lock()

    @overload
    def register(self, candidate: T) -> T: ...

    @overload
    def register(
        self,
        candidate: Literal["from_decorator"] = "from_decorator",
    ) -> Callable[[T], T]: ...

    def register(self, candidate: Any = "from_decorator") -> Any:
        """Validate ``candidate`` and record it as a managed type.

        Works as a class decorator, both as ``@registry.register`` and as
        ``@registry.register()``. Registering the same type twice keeps the
        first registration.

        Args:
            candidate: Runtime class or ``TypeDescriptor``, or ``"from_decorator"``
                to use decorator form.

        Returns:
            ``candidate`` unchanged in direct form, or a decorator callable in
            decorator form.

        Raises:
            BeanwireDefinitionError: If ``candidate`` is not a valid managed type.
            BeanwireInvalidDescriptorError: If ``candidate`` is neither a class nor
                a descriptor.

        """
        if candidate == "from_decorator":

            def decorator(decorated: T) -> T:
                self.add(decorated)
                return decorated

            return decorator

        self.add(candidate)
        return candidate

    def add(self, candidate: Any) -> ManagedTypeRegistration:
        """Validate ``candidate`` and return its registration."""
        descriptor = as_type_descriptor(candidate)
        existing = self._registrations.get(descriptor.key)
        if existing is not None:
            return existing

        self.validator.validate_managed_type(descriptor)
        registration = ManagedTypeRegistration(
            descriptor=descriptor,
            constructor=self.resolver.resolve_constructor(descriptor),
        )
        with self._lock:
            registration = self._registrations.setdefault(descriptor.key, registration)

        logger.debug(
            "Registered managed type: type=%s constructor=%s",
            descriptor.name,
            registration.constructor.name,
        )
        return registration

    def get(self, candidate: Any) -> ManagedTypeRegistration | None:
        return self._registrations.get(self._key_of(candidate))

    def _key_of(self, candidate: Any) -> Hashable:
        if isinstance(candidate, TypeDescriptor) and not isinstance(candidate, type):
            return candidate.key
        return candidate

    def __contains__(self, candidate: object) -> bool:
        return self._key_of(candidate) in self._registrations

    def __len__(self) -> int:
        return len(self._registrations)

    def __iter__(self) -> Iterator[ManagedTypeRegistration]:
        return iter(list(self._registrations.values()))


__all__ = ["ManagedTypeRegistration", "ManagedTypeRegistry"]
