from beanwire.descriptors import (
    ClassTypeDescriptor,
    ConstructorDescriptor,
    ConstructorSpec,
    TypeDescriptor,
    TypeSpec,
    describe_type,
)
from beanwire.exceptions import (
    BeanwireAmbiguousConstructorError,
    BeanwireDefinitionError,
    BeanwireError,
    BeanwireInvalidDescriptorError,
    BeanwireNoEligibleConstructorError,
    BeanwireStructuralViolationError,
)
from beanwire.markers import (
    Extension,
    Marker,
    MarkerSet,
    constructor,
    decorator,
    inject,
    veto_module,
    vetoed,
)
from beanwire.policies import ConstructorTieBreak
from beanwire.registry import ManagedTypeRegistration, ManagedTypeRegistry
from beanwire.resolution import ConstructorResolver, ResolutionCache
from beanwire.validators import EligibilityRule, ManagedTypeValidator, RuleViolation

__all__ = [
    "BeanwireAmbiguousConstructorError",
    "BeanwireDefinitionError",
    "BeanwireError",
    "BeanwireInvalidDescriptorError",
    "BeanwireNoEligibleConstructorError",
    "BeanwireStructuralViolationError",
    "ClassTypeDescriptor",
    "ConstructorDescriptor",
    "ConstructorResolver",
    "ConstructorSpec",
    "ConstructorTieBreak",
    "EligibilityRule",
    "Extension",
    "ManagedTypeRegistration",
    "ManagedTypeRegistry",
    "ManagedTypeValidator",
    "Marker",
    "MarkerSet",
    "ResolutionCache",
    "RuleViolation",
    "TypeDescriptor",
    "TypeSpec",
    "constructor",
    "decorator",
    "describe_type",
    "inject",
    "veto_module",
    "vetoed",
]
