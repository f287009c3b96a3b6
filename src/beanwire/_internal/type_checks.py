from __future__ import annotations

import inspect
import types
from typing import Any, TypeGuard

from beanwire.markers import Extension


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_top_level_class(cls: type[Any]) -> bool:
    """Return true when ``cls`` is declared at module level.

    Classes nested in another class or defined inside a function carry a dotted
    ``__qualname__`` and are not top level.
    """
    return "." not in cls.__qualname__


def is_abstract_class(cls: type[Any]) -> bool:
    return inspect.isabstract(cls) or bool(getattr(cls, "_is_protocol", False))


def is_extension_class(cls: type[Any]) -> bool:
    return issubclass(cls, Extension)


__all__ = [
    "is_abstract_class",
    "is_extension_class",
    "is_runtime_class",
    "is_top_level_class",
]
