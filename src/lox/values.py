"""Runtime value helpers: truthiness, equality, and the value-to-string contract."""

from __future__ import annotations

import math


def is_truthy(value: object) -> bool:
    """Return False for nil and false, True for every other value."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left: object, right: object) -> bool:
    """Structural equality; values of different runtime types are never equal."""
    if left is None or right is None:
        return left is right
    if type(left) is not type(right):
        return False
    return left == right


def stringify(value: object) -> str:
    """Render a runtime value the way `print` shows it."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_number(value)
    return str(value)


def _format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e16:
        return f"{value:.0f}"
    # Shortest round-trip digits; exponent without padding or a plus sign (1e-7, 1.5e300)
    mantissa, _, exponent = repr(value).partition("e")
    if not exponent:
        return mantissa
    return f"{mantissa}e{int(exponent)}"
