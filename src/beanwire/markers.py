from __future__ import annotations

import sys
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from types import ModuleType
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from typing_extensions import Self

T = TypeVar("T")
C = TypeVar("C", bound=type[Any])

MARKERS_ATTRIBUTE = "__beanwire_markers__"
CONSTRUCTOR_ATTRIBUTE = "__beanwire_constructor__"
MODULE_VETOED_ATTRIBUTE = "__beanwire_vetoed__"


class Marker(str, Enum):
    """Marker attributes understood by the eligibility rules and the resolver."""

    INJECT = "inject"
    """The constructor should be used for dependency injection."""

    DECORATOR = "decorator"
    """The type is a structural decorator and is exempt from the concreteness rule."""

    VETOED = "vetoed"
    """The type, or every type in the marked module, is excluded from management."""


@dataclass(frozen=True, slots=True)
class MarkerSet:
    """Immutable set of markers attached to a type, module or constructor.

    Rules query markers through ``has`` only, so any introspection mechanism can
    feed them by building a ``MarkerSet``.

    Examples:
        .. code-block:: python

            markers = MarkerSet.of(Marker.INJECT)
            assert markers.has(Marker.INJECT)
            assert Marker.VETOED not in markers

    """

    markers: frozenset[Marker] = field(default_factory=frozenset)

    @classmethod
    def of(cls, *markers: Marker) -> Self:
        return cls(frozenset(markers))

    @classmethod
    def from_iterable(cls, markers: Iterable[Marker]) -> Self:
        return cls(frozenset(markers))

    def has(self, marker: Marker) -> bool:
        """Return true when ``marker`` is present."""
        return marker in self.markers

    def with_marker(self, marker: Marker) -> Self:
        return type(self)(self.markers | {marker})

    def __contains__(self, marker: object) -> bool:
        return marker in self.markers

    def __iter__(self) -> Iterator[Marker]:
        return iter(sorted(self.markers, key=lambda marker: marker.value))

    def __len__(self) -> int:
        return len(self.markers)


EMPTY_MARKERS = MarkerSet()


class Extension:
    """Base class for types that take part in bootstrapping the container itself.

    Subclasses are never accepted as managed types.
    """


def _marker_target(obj: Any) -> Any:
    if isinstance(obj, (classmethod, staticmethod)):
        return obj.__func__
    return obj


def _attach(obj: T, marker: Marker) -> T:
    target = _marker_target(obj)
    if isinstance(target, type):
        # Read from the class namespace so markers are not inherited by subclasses.
        current = target.__dict__.get(MARKERS_ATTRIBUTE, EMPTY_MARKERS)
    else:
        current = getattr(target, MARKERS_ATTRIBUTE, EMPTY_MARKERS)
    setattr(target, MARKERS_ATTRIBUTE, current.with_marker(marker))
    return obj


def markers_of(obj: object) -> MarkerSet:
    """Return markers attached directly to a class or a callable.

    Class markers are looked up in the class namespace only. A subclass of a
    vetoed class is not vetoed itself.
    """
    target = _marker_target(obj)
    if isinstance(target, type):
        markers = target.__dict__.get(MARKERS_ATTRIBUTE, EMPTY_MARKERS)
    else:
        markers = getattr(target, MARKERS_ATTRIBUTE, EMPTY_MARKERS)
    if isinstance(markers, MarkerSet):
        return markers
    return EMPTY_MARKERS


def inject(func: T) -> T:
    """Mark ``__init__`` or an alternate constructor as the injection constructor.

    Examples:
        .. code-block:: python

            class Service:
                @inject
                def __init__(self, repository: Repository) -> None:
                    self.repository = repository

    """
    return _attach(func, Marker.INJECT)


def decorator(cls: C) -> C:
    """Mark a class as a structural decorator so it may stay abstract."""
    return _attach(cls, Marker.DECORATOR)


def vetoed(cls: C) -> C:
    """Exclude a class from being registered as a managed type."""
    return _attach(cls, Marker.VETOED)


def constructor(func: Callable[..., T]) -> classmethod[Any, Any, T]:
    """Declare a classmethod as an additional public constructor of its class.

    The function is wrapped into a ``classmethod`` when it is not one already.
    Combine with ``@inject`` to make it the injection constructor.

    Examples:
        .. code-block:: python

            class Client:
                def __init__(self, url: str, timeout: float) -> None: ...

                @constructor
                @inject
                def from_settings(cls, settings: Settings) -> Client:
                    return cls(settings.url, settings.timeout)

    """
    method = func if isinstance(func, classmethod) else classmethod(func)
    setattr(method.__func__, CONSTRUCTOR_ATTRIBUTE, True)
    return method


def is_constructor(obj: object) -> bool:
    """Return true when ``obj`` is a classmethod declared with ``@constructor``."""
    return isinstance(obj, classmethod) and bool(
        getattr(obj.__func__, CONSTRUCTOR_ATTRIBUTE, False),
    )


def veto_module(module: str | ModuleType) -> ModuleType:
    """Veto every class declared in ``module``.

    Call it from the module itself as ``veto_module(__name__)``, or set
    ``__beanwire_vetoed__ = True`` at module level.
    """
    target = sys.modules[module] if isinstance(module, str) else module
    setattr(target, MODULE_VETOED_ATTRIBUTE, True)
    return target


def module_markers(module_name: str) -> MarkerSet:
    """Return markers declared by a module or by the package that contains it."""
    names = [module_name]
    package_name, _, _ = module_name.rpartition(".")
    if package_name:
        names.append(package_name)

    for name in names:
        module = sys.modules.get(name)
        if module is not None and getattr(module, MODULE_VETOED_ATTRIBUTE, False):
            return MarkerSet.of(Marker.VETOED)
    return EMPTY_MARKERS


__all__ = [
    "EMPTY_MARKERS",
    "Extension",
    "Marker",
    "MarkerSet",
    "constructor",
    "decorator",
    "inject",
    "is_constructor",
    "markers_of",
    "module_markers",
    "veto_module",
    "vetoed",
]
