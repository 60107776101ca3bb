"""
Input validation shared by the registries

Pure functions: return the cleaned value or raise a ValidationRejected
subclass. Registries translate the exception into "nothing changed".
"""

import math

from moneytracker.kernel.errors import BlankName, NonFiniteAmount, NonPositiveAmount


def require_name(name: str, entity: str) -> str:
    """
    Trim a user-supplied name

    Raises:
        BlankName: If nothing but whitespace remains
    """
    trimmed = name.strip()
    if not trimmed:
        raise BlankName(entity)
    return trimmed


def require_positive(value: float, field: str) -> float:
    """
    Raises:
        NonPositiveAmount: If value is <= 0 or not a finite number
    """
    if not math.isfinite(value) or value <= 0:
        raise NonPositiveAmount(field, value)
    return value


def require_finite(value: float, field: str) -> float:
    """
    Raises:
        NonFiniteAmount: If value is NaN or infinite
    """
    if not math.isfinite(value):
        raise NonFiniteAmount(field, value)
    return value
