"""
Circumference-based body-fat estimate (U.S. Navy method).

All inputs are in inches. The estimator never raises for bad input: missing,
non-positive or inconsistent measurements simply produce no value, which is
the normal state while someone is still typing their measurements in.
"""

import math

from bodylog.core.units import to_number

# Estimates outside (MIN, MAX) are treated as measurement mistakes
PLAUSIBLE_MIN = 0.0
PLAUSIBLE_MAX = 75.0


def _positive(value) -> float | None:
    n = to_number(value)
    if n is None or n <= 0:
        return None
    return n


def estimate_body_fat(sex, neck, waist, height, hips=None) -> float | None:
    """
    Estimate body-fat percentage from neck, waist, height (and hips for women).

    Returns the unrounded estimate, or None when the inputs are insufficient
    or the result falls outside the plausible range.
    """
    sex = getattr(sex, "value", sex)
    neck = _positive(neck)
    waist = _positive(waist)
    height = _positive(height)

    if neck is None or waist is None or height is None:
        return None

    if sex == "male":
        if waist <= neck:
            return None
        bf = 86.01 * math.log10(waist - neck) - 70.041 * math.log10(height) + 36.76
    elif sex == "female":
        hips = _positive(hips)
        if hips is None or waist + hips <= neck:
            return None
        bf = (
            163.205 * math.log10(waist + hips - neck)
            - 97.684 * math.log10(height)
            - 78.387
        )
    else:
        return None

    if not math.isfinite(bf) or not PLAUSIBLE_MIN < bf < PLAUSIBLE_MAX:
        return None
    return bf
