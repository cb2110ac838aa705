"""
Unit conversion for body measurements.

Lengths are stored in centimetres and edited in inches; weight is entered in
pounds. Missing or unparseable input converts to None rather than raising, so
half-filled forms stay representable.
"""

import math

CM_PER_INCH = 2.54
LB_PER_KG = 2.20462


def to_number(value) -> float | None:
    """Parse a form value (number or numeric string) into a finite float."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        n = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(n):
        return None
    return n


def inches_to_cm(value) -> float | None:
    n = to_number(value)
    if n is None:
        return None
    return round(n * CM_PER_INCH, 2)


def cm_to_inches(value) -> float | None:
    n = to_number(value)
    if n is None:
        return None
    return round(n / CM_PER_INCH, 1)


def lb_to_kg(value) -> float | None:
    n = to_number(value)
    if n is None:
        return None
    return round(n / LB_PER_KG, 2)


def kg_to_lb(value) -> float | None:
    n = to_number(value)
    if n is None:
        return None
    return round(n * LB_PER_KG, 1)
