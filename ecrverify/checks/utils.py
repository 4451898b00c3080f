"""Shared utility functions for checks."""

from typing import Any


def normalize(value: Any) -> Any:
    """Normalize a value for comparison across declared and live sources.

    HCL booleans arrive as Python bools while some outputs arrive as strings,
    so booleans are compared by their Terraform spelling and everything else
    that is not a string is left untouched.

    Example:
        >>> normalize(True)
        'true'
        >>> normalize("IMMUTABLE")
        'IMMUTABLE'
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


def pick(value: Any, index: int) -> Any:
    """Select the expected value for the index-th declared repository.

    A list is matched to repositories by position; a scalar applies to every
    repository.

    Example:
        >>> pick(["a", "b"], 1)
        'b'
        >>> pick("a", 3)
        'a'
    """
    if isinstance(value, (list, tuple)):
        return value[index] if index < len(value) else None
    return value
