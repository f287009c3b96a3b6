from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from beanwire.descriptors import TypeDescriptor, as_type_descriptor
from beanwire.exceptions import BeanwireDefinitionError, BeanwireStructuralViolationError
from beanwire.markers import Marker
from beanwire.resolution import ConstructorResolver


class EligibilityRule(str, Enum):
    """Structural rules a managed type must satisfy, in evaluation order."""

    TOP_LEVEL = "top_level"
    """The type is declared at module level."""

    CONCRETE = "concrete"
    """The type is concrete, or marked with ``@decorator``."""

    NOT_EXTENSION = "not_extension"
    """The type does not subclass ``Extension``."""

    NOT_VETOED = "not_vetoed"
    """Neither the type nor its module is vetoed."""

    HAS_CONSTRUCTOR = "has_constructor"
    """The type has a zero-parameter or an ``@inject`` constructor."""


@dataclass(frozen=True, slots=True)
class RuleViolation:
    """First rule a candidate type failed, together with the error to raise."""

    rule: EligibilityRule
    error: BeanwireDefinitionError

    @property
    def message(self) -> str:
        return str(self.error)


RuleCheck = Callable[[TypeDescriptor, ConstructorResolver], RuleViolation | None]


def _structural_violation(
    descriptor: TypeDescriptor,
    rule: EligibilityRule,
    requirement: str,
) -> RuleViolation:
    msg = f"The managed type '{descriptor.name}' {requirement}."
    error = BeanwireStructuralViolationError(msg, type_name=descriptor.name, rule=rule)
    return RuleViolation(rule=rule, error=error)


def check_top_level(
    descriptor: TypeDescriptor,
    _resolver: ConstructorResolver,
) -> RuleViolation | None:
    if descriptor.is_top_level:
        return None
    return _structural_violation(
        descriptor,
        EligibilityRule.TOP_LEVEL,
        "must not be an inner type",
    )


def check_concrete(
    descriptor: TypeDescriptor,
    _resolver: ConstructorResolver,
) -> RuleViolation | None:
    if not descriptor.is_abstract or descriptor.markers.has(Marker.DECORATOR):
        return None
    return _structural_violation(
        descriptor,
        EligibilityRule.CONCRETE,
        "must be a concrete type",
    )


def check_not_extension(
    descriptor: TypeDescriptor,
    _resolver: ConstructorResolver,
) -> RuleViolation | None:
    if not descriptor.is_extension:
        return None
    return _structural_violation(
        descriptor,
        EligibilityRule.NOT_EXTENSION,
        "must not implement the extension capability",
    )


def check_not_vetoed(
    descriptor: TypeDescriptor,
    _resolver: ConstructorResolver,
) -> RuleViolation | None:
    if not descriptor.markers.has(Marker.VETOED) and not descriptor.module_markers.has(
        Marker.VETOED,
    ):
        return None
    return _structural_violation(
        descriptor,
        EligibilityRule.NOT_VETOED,
        "must not be vetoed, directly or via its package",
    )


def check_has_constructor(
    descriptor: TypeDescriptor,
    resolver: ConstructorResolver,
) -> RuleViolation | None:
    try:
        resolver.resolve_constructor(descriptor)
    except BeanwireDefinitionError as error:
        return RuleViolation(rule=EligibilityRule.HAS_CONSTRUCTOR, error=error)
    return None


DEFAULT_RULES: tuple[RuleCheck, ...] = (
    check_top_level,
    check_concrete,
    check_not_extension,
    check_not_vetoed,
    check_has_constructor,
)


class ManagedTypeValidator:
    """Validate that candidate types may be registered as managed types.

    Rules run in order and stop at the first violation. The last default rule
    resolves the injection constructor, which warms the resolver cache.
    """

    def __init__(
        self,
        resolver: ConstructorResolver | None = None,
        *,
        rules: Sequence[RuleCheck] | None = None,
    ) -> None:
        self.resolver = resolver if resolver is not None else ConstructorResolver()
        self.rules: tuple[RuleCheck, ...] = tuple(rules) if rules is not None else DEFAULT_RULES

    def check(self, candidate: TypeDescriptor | type) -> RuleViolation | None:
        """Return the first rule violation of ``candidate``, or ``None`` when it is eligible."""
        descriptor = as_type_descriptor(candidate)
        for rule in self.rules:
            violation = rule(descriptor, self.resolver)
            if violation is not None:
                return violation
        return None

    def validate_managed_type(self, candidate: TypeDescriptor | type) -> None:
        """Validate that ``candidate`` qualifies as a managed type.

        Args:
            candidate: Type descriptor, or a runtime class described on the fly.

        Raises:
            BeanwireStructuralViolationError: If a structural rule fails.
            BeanwireNoEligibleConstructorError: If no injection constructor exists.
            BeanwireAmbiguousConstructorError: If the resolver rejects an ambiguous
                constructor choice.

        """
        violation = self.check(candidate)
        if violation is not None:
            raise violation.error

    def is_managed_type(self, candidate: TypeDescriptor | type) -> bool:
        return self.check(candidate) is None


__all__ = [
    "DEFAULT_RULES",
    "EligibilityRule",
    "ManagedTypeValidator",
    "RuleCheck",
    "RuleViolation",
    "check_concrete",
    "check_has_constructor",
    "check_not_extension",
    "check_not_vetoed",
    "check_top_level",
]
