from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from beanwire.validators import EligibilityRule


class BeanwireError(Exception):
    """Represent a base class for all beanwire-specific failures.

    Catch this type when you want to handle any beanwire error path without
    matching each concrete exception class individually.
    """


class BeanwireDefinitionError(BeanwireError):
    """Signal that a candidate type cannot be registered as a managed type.

    Raised by ``ManagedTypeValidator.validate_managed_type``,
    ``ConstructorResolver.resolve_constructor`` and
    ``ManagedTypeRegistry.register``. The failure is final for the type under
    its current declarations.
    """

    def __init__(self, message: str, *, type_name: str) -> None:
        super().__init__(message)
        self.type_name = type_name


class BeanwireStructuralViolationError(BeanwireDefinitionError):
    """Signal that a candidate type breaks one of the structural eligibility rules.

    ``rule`` names the first rule that failed. Rules after it were not evaluated.

    Typical fixes include moving the class to module level, removing the
    ``Extension`` base, dropping a ``vetoed`` marker, or marking an abstract
    structural decorator with ``@decorator``.
    """

    def __init__(self, message: str, *, type_name: str, rule: EligibilityRule) -> None:
        super().__init__(message, type_name=type_name)
        self.rule = rule


class BeanwireNoEligibleConstructorError(BeanwireDefinitionError):
    """Signal that a candidate type has no constructor the container may use.

    A type needs either a constructor without parameters or a constructor
    marked with ``@inject``.
    """

    def __init__(self, type_name: str) -> None:
        msg = (
            f"The managed type '{type_name}' does not have a constructor with no parameters "
            "and declares no constructor marked with @inject."
        )
        super().__init__(msg, type_name=type_name)


class BeanwireAmbiguousConstructorError(BeanwireDefinitionError):
    """Signal that several constructors rank equally for injection.

    Raised only when the resolver is configured with
    ``ConstructorTieBreak.ERROR``. Keep a single ``@inject`` constructor with the
    highest parameter count to fix it.
    """

    def __init__(self, type_name: str, candidates: Sequence[str]) -> None:
        names = ", ".join(candidates)
        msg = (
            f"The managed type '{type_name}' has several equally ranked injection "
            f"constructors: {names}."
        )
        super().__init__(msg, type_name=type_name)
        self.candidates = tuple(candidates)


class BeanwireInvalidDescriptorError(BeanwireError):
    """Signal that a value cannot be described as a candidate type.

    Raised by ``describe_type`` when it receives something other than a runtime
    class, for example an instance, a function or a parametrized generic alias.
    """
