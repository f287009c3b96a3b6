from __future__ import annotations

import inspect
from collections.abc import Callable, Hashable, Iterator
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from beanwire._internal.type_checks import (
    is_abstract_class,
    is_extension_class,
    is_runtime_class,
    is_top_level_class,
)
from beanwire.exceptions import BeanwireInvalidDescriptorError
from beanwire.markers import (
    EMPTY_MARKERS,
    MarkerSet,
    is_constructor,
    markers_of,
    module_markers,
)

_VARIADIC_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@runtime_checkable
class ConstructorDescriptor(Protocol):
    """Read-only view of one declared constructor of a candidate type."""

    @property
    def name(self) -> str: ...

    @property
    def parameter_count(self) -> int: ...

    @property
    def markers(self) -> MarkerSet: ...


@runtime_checkable
class TypeDescriptor(Protocol):
    """Read-only view of a candidate type as seen by the eligibility rules.

    ``key`` is the identity used by ``ResolutionCache``. Two descriptors with
    equal keys describe the same type.
    """

    @property
    def key(self) -> Hashable: ...

    @property
    def name(self) -> str: ...

    @property
    def is_top_level(self) -> bool: ...

    @property
    def is_abstract(self) -> bool: ...

    @property
    def is_extension(self) -> bool: ...

    @property
    def markers(self) -> MarkerSet: ...

    @property
    def module_markers(self) -> MarkerSet: ...

    def constructors(self) -> tuple[ConstructorDescriptor, ...]: ...


@dataclass(frozen=True, slots=True)
class ConstructorSpec:
    """Plain constructor descriptor for hosts that do not describe Python classes."""

    name: str
    parameter_count: int
    markers: MarkerSet = EMPTY_MARKERS


@dataclass(frozen=True)
class TypeSpec:
    """Plain type descriptor built from explicit values.

    ``name`` is the cache key, so it must be unique per resolver. A second
    ``TypeSpec`` with the same name is treated as the same type and gets the
    constructor resolved for the first one, whatever constructors it declares.

    Examples:
        .. code-block:: python

            spec = TypeSpec(
                name="billing.Invoice",
                constructor_specs=(
                    ConstructorSpec("Invoice()", 0),
                    ConstructorSpec("Invoice(a, b)", 2, MarkerSet.of(Marker.INJECT)),
                ),
            )

    """

    name: str
    constructor_specs: tuple[ConstructorDescriptor, ...] = ()
    is_top_level: bool = True
    is_abstract: bool = False
    is_extension: bool = False
    markers: MarkerSet = EMPTY_MARKERS
    module_markers: MarkerSet = EMPTY_MARKERS

    @property
    def key(self) -> Hashable:
        return self.name

    def constructors(self) -> tuple[ConstructorDescriptor, ...]:
        return self.constructor_specs


@dataclass(frozen=True, slots=True)
class CallableConstructorDescriptor:
    """Constructor descriptor backed by ``__init__`` or an ``@constructor`` classmethod."""

    name: str
    parameter_count: int
    markers: MarkerSet
    function: Callable[..., Any] = field(compare=False, repr=False)

    @classmethod
    def from_function(
        cls,
        owner: type[Any],
        name: str,
        function: Callable[..., Any],
    ) -> CallableConstructorDescriptor:
        return cls(
            name=f"{owner.__qualname__}.{name}",
            parameter_count=count_parameters(function),
            markers=markers_of(function),
            function=function,
        )


def count_parameters(function: Callable[..., Any]) -> int:
    """Count named parameters of an unbound constructor function.

    The leading ``self``/``cls`` parameter and ``*args``/``**kwargs`` are not
    counted, so ``object.__init__`` has zero parameters.
    """
    try:
        signature = inspect.signature(function)
    except (ValueError, TypeError):
        return 0

    parameters = list(signature.parameters.values())[1:]
    return sum(1 for parameter in parameters if parameter.kind not in _VARIADIC_KINDS)


@dataclass(frozen=True, slots=True)
class ClassTypeDescriptor:
    """Describe a runtime Python class through ``inspect``."""

    cls: type[Any]

    @property
    def key(self) -> Hashable:
        return self.cls

    @property
    def name(self) -> str:
        return f"{self.cls.__module__}.{self.cls.__qualname__}"

    @property
    def is_top_level(self) -> bool:
        return is_top_level_class(self.cls)

    @property
    def is_abstract(self) -> bool:
        return is_abstract_class(self.cls)

    @property
    def is_extension(self) -> bool:
        return is_extension_class(self.cls)

    @property
    def markers(self) -> MarkerSet:
        return markers_of(self.cls)

    @property
    def module_markers(self) -> MarkerSet:
        return module_markers(self.cls.__module__)

    def constructors(self) -> tuple[ConstructorDescriptor, ...]:
        """Return ``__init__`` followed by public ``@constructor`` classmethods.

        Alternate constructors are collected along the MRO, in declaration
        order within each class. A name overridden by a subclass is taken from
        the subclass only.
        """
        init = CallableConstructorDescriptor.from_function(self.cls, "__init__", self.cls.__init__)
        return (init, *self._alternate_constructors())

    def _alternate_constructors(self) -> Iterator[CallableConstructorDescriptor]:
        seen: set[str] = set()
        for klass in inspect.getmro(self.cls):
            for name, member in vars(klass).items():
                if name in seen:
                    continue
                seen.add(name)
                if name.startswith("_") or not is_constructor(member):
                    continue
                yield CallableConstructorDescriptor.from_function(self.cls, name, member.__func__)


def describe_type(cls: object) -> ClassTypeDescriptor:
    """Build a ``TypeDescriptor`` for a runtime class.

    Args:
        cls: Class to describe.

    Raises:
        BeanwireInvalidDescriptorError: If ``cls`` is not a runtime class.

    """
    if not is_runtime_class(cls):
        msg = f"Managed type candidate must be a class, got {cls!r}."
        raise BeanwireInvalidDescriptorError(msg)
    return ClassTypeDescriptor(cls)


def as_type_descriptor(candidate: object) -> TypeDescriptor:
    """Return ``candidate`` as a descriptor, describing runtime classes on the fly."""
    if is_runtime_class(candidate):
        return ClassTypeDescriptor(candidate)
    if isinstance(candidate, TypeDescriptor):
        return candidate
    msg = f"Expected a class or a TypeDescriptor, got {candidate!r}."
    raise BeanwireInvalidDescriptorError(msg)


__all__ = [
    "CallableConstructorDescriptor",
    "ClassTypeDescriptor",
    "ConstructorDescriptor",
    "ConstructorSpec",
    "TypeDescriptor",
    "TypeSpec",
    "as_type_descriptor",
    "count_parameters",
    "describe_type",
]
