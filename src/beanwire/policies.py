from enum import Enum


class ConstructorTieBreak(str, Enum):
    """Policy for choosing between equally ranked injection constructors."""

    FIRST_DECLARED = "first_declared"
    """Pick the constructor declared first among those with the same parameter count."""

    ERROR = "error"
    """Raise ``BeanwireAmbiguousConstructorError`` when the pick is not unique."""
