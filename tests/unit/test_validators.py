from __future__ import annotations

import abc
import sys
from types import ModuleType

import pytest

from beanwire.descriptors import ConstructorDescriptor, ConstructorSpec, TypeDescriptor, TypeSpec
from beanwire.exceptions import (
    BeanwireDefinitionError,
    BeanwireNoEligibleConstructorError,
    BeanwireStructuralViolationError,
)
from beanwire.markers import Extension, Marker, MarkerSet, decorator, inject, vetoed
from beanwire.resolution import ConstructorResolver
from beanwire.validators import (
    DEFAULT_RULES,
    EligibilityRule,
    ManagedTypeValidator,
    RuleViolation,
    check_has_constructor,
    check_top_level,
)

ZERO = ConstructorSpec("T()", 0)


def make_spec(**overrides: object) -> TypeSpec:
    values: dict[str, object] = {"name": "app.Candidate", "constructor_specs": (ZERO,)}
    values.update(overrides)
    return TypeSpec(**values)  # type: ignore[arg-type]


class Service:
    pass


class Outer:
    class Inner:
        pass


class AbstractHandler(abc.ABC):
    @abc.abstractmethod
    def handle(self) -> None: ...


@decorator
class LoggingHandler(AbstractHandler):
    def __init__(self) -> None:
        self.calls = 0


class Bootstrap(Extension):
    pass


@vetoed
class Retired:
    pass


class NeedsDsn:
    def __init__(self, dsn: str) -> None:
        self.dsn = dsn


class InjectedDsn:
    @inject
    def __init__(self, dsn: str) -> None:
        self.dsn = dsn


def test_valid_managed_type_passes(validator: ManagedTypeValidator) -> None:
    validator.validate_managed_type(Service)

    assert validator.check(Service) is None
    assert validator.is_managed_type(Service) is True


def test_validation_warms_the_resolution_cache(validator: ManagedTypeValidator) -> None:
    validator.validate_managed_type(InjectedDsn)

    assert InjectedDsn in validator.resolver.cache


@pytest.mark.parametrize(
    "overrides",
    [
        {},
        {"is_abstract": True},
        {"is_extension": True},
        {"markers": MarkerSet.of(Marker.VETOED)},
        {"constructor_specs": ()},
    ],
)
def test_nested_types_fail_with_inner_type_violation(
    validator: ManagedTypeValidator,
    overrides: dict[str, object],
) -> None:
    spec = make_spec(is_top_level=False, **overrides)

    with pytest.raises(BeanwireStructuralViolationError, match="must not be an inner type") as exc:
        validator.validate_managed_type(spec)

    assert exc.value.rule is EligibilityRule.TOP_LEVEL
    assert exc.value.type_name == "app.Candidate"


def test_nested_runtime_class_fails(validator: ManagedTypeValidator) -> None:
    with pytest.raises(BeanwireStructuralViolationError, match="must not be an inner type"):
        validator.validate_managed_type(Outer.Inner)


def test_abstract_type_fails_with_concrete_violation(validator: ManagedTypeValidator) -> None:
    with pytest.raises(BeanwireStructuralViolationError, match="must be a concrete type") as exc:
        validator.validate_managed_type(AbstractHandler)

    assert exc.value.rule is EligibilityRule.CONCRETE


def test_decorator_marked_abstract_type_passes(validator: ManagedTypeValidator) -> None:
    assert validator.check(LoggingHandler) is None

    spec = make_spec(is_abstract=True, markers=MarkerSet.of(Marker.DECORATOR))
    validator.validate_managed_type(spec)


def test_extension_type_fails_even_if_otherwise_eligible(validator: ManagedTypeValidator) -> None:
    with pytest.raises(
        BeanwireStructuralViolationError,
        match="must not implement the extension capability",
    ) as exc:
        validator.validate_managed_type(Bootstrap)

    assert exc.value.rule is EligibilityRule.NOT_EXTENSION


def test_vetoed_type_fails(validator: ManagedTypeValidator) -> None:
    with pytest.raises(BeanwireStructuralViolationError, match="must not be vetoed") as exc:
        validator.validate_managed_type(Retired)

    assert exc.value.rule is EligibilityRule.NOT_VETOED


def test_type_in_vetoed_package_fails(
    validator: ManagedTypeValidator,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    package = ModuleType("legacy")
    package.__beanwire_vetoed__ = True  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "legacy", package)
    payment = type("Payment", (), {"__module__": "legacy.payments"})

    with pytest.raises(BeanwireStructuralViolationError, match="via its package") as exc:
        validator.validate_managed_type(payment)

    assert exc.value.rule is EligibilityRule.NOT_VETOED


def test_vetoed_module_marker_on_descriptor_fails(validator: ManagedTypeValidator) -> None:
    spec = make_spec(module_markers=MarkerSet.of(Marker.VETOED))

    violation = validator.check(spec)

    assert violation is not None
    assert violation.rule is EligibilityRule.NOT_VETOED


def test_missing_constructor_surfaces_resolver_error(validator: ManagedTypeValidator) -> None:
    with pytest.raises(BeanwireNoEligibleConstructorError):
        validator.validate_managed_type(NeedsDsn)

    violation = validator.check(NeedsDsn)
    assert violation is not None
    assert violation.rule is EligibilityRule.HAS_CONSTRUCTOR
    assert "does not have a constructor with no parameters" in violation.message


def test_first_failing_rule_wins(validator: ManagedTypeValidator) -> None:
    spec = make_spec(
        is_abstract=True,
        is_extension=True,
        markers=MarkerSet.of(Marker.VETOED),
        constructor_specs=(),
    )

    violation = validator.check(spec)

    assert violation is not None
    assert violation.rule is EligibilityRule.CONCRETE


def test_rules_after_first_violation_are_not_evaluated() -> None:
    class RecordingDescriptor:
        def __init__(self, spec: TypeSpec) -> None:
            self.spec = spec
            self.enumerated = False

        key = property(lambda self: self.spec.key)
        name = property(lambda self: self.spec.name)
        is_top_level = property(lambda self: self.spec.is_top_level)
        is_abstract = property(lambda self: self.spec.is_abstract)
        is_extension = property(lambda self: self.spec.is_extension)
        markers = property(lambda self: self.spec.markers)
        module_markers = property(lambda self: self.spec.module_markers)

        def constructors(self) -> tuple[ConstructorDescriptor, ...]:
            self.enumerated = True
            return self.spec.constructors()

    resolver = ConstructorResolver()
    descriptor = RecordingDescriptor(make_spec(is_extension=True))

    with pytest.raises(BeanwireStructuralViolationError):
        ManagedTypeValidator(resolver).validate_managed_type(descriptor)

    assert descriptor.enumerated is False
    assert len(resolver.cache) == 0


def test_custom_rules_replace_defaults() -> None:
    def forbid_everything(
        descriptor: TypeDescriptor,
        _resolver: ConstructorResolver,
    ) -> RuleViolation:
        error = BeanwireDefinitionError("closed for registration", type_name=descriptor.name)
        return RuleViolation(rule=EligibilityRule.NOT_VETOED, error=error)

    validator = ManagedTypeValidator(rules=[check_top_level, forbid_everything])

    with pytest.raises(BeanwireDefinitionError, match="closed for registration"):
        validator.validate_managed_type(Service)
    assert validator.is_managed_type(Service) is False


def test_default_rules_are_ordered() -> None:
    assert DEFAULT_RULES[0] is check_top_level
    assert DEFAULT_RULES[-1] is check_has_constructor
    assert len(DEFAULT_RULES) == len(EligibilityRule)


def test_validator_creates_its_own_resolver_by_default() -> None:
    first = ManagedTypeValidator()
    second = ManagedTypeValidator()

    assert first.resolver is not second.resolver
    assert first.resolver.cache is not second.resolver.cache
