"""Numeric coercion, rounding and fallback helpers shared by the calculators."""

import math
from typing import Any, Optional


_MISSING = object()


def is_number(value: Any) -> bool:
    """True for finite ints/floats (booleans excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def to_number(value: Any, fallback: float = 0.0) -> float:
    """Coerce table cells and option values to float.

    Numeric strings are accepted since some exported tables carry them;
    anything else yields ``fallback``.
    """
    if is_number(value):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            parsed = float(value.strip())
        except ValueError:
            return fallback
        return parsed if math.isfinite(parsed) else fallback
    return fallback


def clamp_min_zero(value: float) -> float:
    return 0.0 if value < 0 else value


def first_present(*candidates: Any, default: Any = _MISSING) -> Any:
    """Return the first candidate that is not None.

    This is the single fallback chain used for every option that has more
    than one source: explicit option value, then the tables bundle default,
    then the ``config`` constant passed as ``default``.
    """
    for candidate in candidates:
        if candidate is not None:
            return candidate
    if default is _MISSING:
        return None
    return default


def round_half_up(value: float, digits: int = 2) -> float:
    """Round the way a spreadsheet ROUND() does (halves away from zero).

    Python's built-in round() uses banker's rounding, which drifts from the
    workbook on values such as 2.675.
    """
    factor = 10 ** digits
    scaled = abs(value) * factor
    # Nudge by a few ULPs so 1.005 * 100 = 100.49999... still rounds up
    rounded = math.floor(scaled + 0.5 + 1e-9) / factor
    return math.copysign(rounded, value) if value else 0.0


def fraction_or_percent(value: Optional[float]) -> float:
    """Normalize a 0-1 ratio or a percent-like value (> 1) to [0, 1]."""
    raw = to_number(value)
    factor = raw / 100 if raw > 1 else raw
    return min(1.0, clamp_min_zero(factor))
