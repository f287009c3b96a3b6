"""Shared pytest fixtures for beanwire tests."""

import pytest

from beanwire.policies import ConstructorTieBreak
from beanwire.registry import ManagedTypeRegistry
from beanwire.resolution import ConstructorResolver
from beanwire.validators import ManagedTypeValidator


@pytest.fixture()
def resolver() -> ConstructorResolver:
    """Resolver with its own cache and the default tie-break policy."""
    return ConstructorResolver()


@pytest.fixture()
def strict_resolver() -> ConstructorResolver:
    """Resolver that rejects ambiguous constructor choices."""
    return ConstructorResolver(tie_break=ConstructorTieBreak.ERROR)


@pytest.fixture()
def validator(resolver: ConstructorResolver) -> ManagedTypeValidator:
    """Validator sharing the ``resolver`` fixture cache."""
    return ManagedTypeValidator(resolver)


@pytest.fixture()
def registry(resolver: ConstructorResolver) -> ManagedTypeRegistry:
    """Registry sharing the ``resolver`` fixture cache."""
    return ManagedTypeRegistry(resolver)
