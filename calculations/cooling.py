"""Cooling time from one-dimensional heat conduction (Cooling sheet)."""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .lookups import approximate_lookup, resin_keys
from .models import CoolingOption, COOLING_OPTIONS, InputData, Options
from .values import clamp_min_zero, to_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoolingDebug:
    """Which rows fed the cooling value and what each step produced."""
    option: str
    grade_matched: bool
    matched_key: Optional[str]
    effective_thickness_mm: float
    base_without_grade_extra: float
    grade_extra_s: float
    base_cooling: float
    clamp_force_reference_ton: Optional[float]
    clamp_offset_s: float
    raw_cooling_with_clamp: float
    min_cooling_time_s: float
    applied_min_cooling: bool
    final_cooling: float


@dataclass(frozen=True)
class CoolingResult:
    value: float
    debug: CoolingDebug


def find_cooling_grade(resin: str, grade: str, tables):
    """Find the grade row for resin + grade, trying alias spellings of the resin.

    Returns:
        Tuple of (row or None, key that matched or None)
    """
    by_key = {row.key: row for row in tables.cooling_grades}
    for resin_name in resin_keys(resin, tables.resin_aliases):
        key = f"{resin_name}||{grade}"
        if key in by_key:
            return by_key[key], key
    return None, None


def effective_thickness(thickness_mm: float, option: str, tables) -> float:
    """Thickness used in the conduction formula.

    LOGIC uses the part thickness as is; BASE reads the stepped table.
    """
    if option == CoolingOption.LOGIC.value:
        return thickness_mm
    step = approximate_lookup(tables.thickness_reference, thickness_mm, key=lambda r: r.input_mm)
    return step.effective_mm if step else thickness_mm


def conduction_time(thickness_mm: float, tm: float, tw: float, te: float, alpha: float) -> float:
    """t = s² / (π²·α) · ln(4/π · (Tm − Tw) / (Te − Tw)); 0 when undefined."""
    if alpha <= 0 or te == tw:
        return 0.0
    log_input = (4 / math.pi) * ((tm - tw) / (te - tw))
    if log_input <= 0:
        return 0.0
    return (thickness_mm ** 2) / (math.pi ** 2 * alpha) * math.log(log_input)


def compute_cooling_time_detailed(input_data: InputData, options: Options, tables) -> CoolingResult:
    """Cooling time with the selected rows and intermediate values.

    An unknown resin + grade never raises: the result is the minimum cooling
    time and ``grade_matched`` is False in the trace.

    Args:
        input_data: Part description (resin, grade, thickness, clamp force)
        options: Machine options (cooling option BASE / LOGIC)
        tables: TablesBundle

    Returns:
        CoolingResult with value and CoolingDebug
    """
    option = options.cooling_option if options.cooling_option in COOLING_OPTIONS else CoolingOption.BASE.value
    min_cooling = to_number(tables.defaults.min_cooling_time_s)
    thickness = clamp_min_zero(to_number(input_data.thickness_mm))
    clamp_force = clamp_min_zero(to_number(input_data.clamp_force_ton))

    row, matched_key = find_cooling_grade(input_data.resin, input_data.grade, tables)
    if row is None:
        logger.debug("No cooling grade for %s / %s, using minimum cooling time",
                     input_data.resin, input_data.grade)
        debug = CoolingDebug(
            option=option,
            grade_matched=False,
            matched_key=None,
            effective_thickness_mm=thickness,
            base_without_grade_extra=0.0,
            grade_extra_s=0.0,
            base_cooling=0.0,
            clamp_force_reference_ton=None,
            clamp_offset_s=0.0,
            raw_cooling_with_clamp=0.0,
            min_cooling_time_s=min_cooling,
            applied_min_cooling=True,
            final_cooling=min_cooling,
        )
        return CoolingResult(value=min_cooling, debug=debug)

    eff_thickness = effective_thickness(thickness, option, tables)
    base_without_extra = conduction_time(eff_thickness, row.tm, row.tw, row.te, row.alpha)
    grade_extra = row.extra_s if option == CoolingOption.BASE.value else 0.0
    base_cooling = base_without_extra + grade_extra

    reference = approximate_lookup(tables.clamp_force_reference, clamp_force, key=lambda r: r.clamp_force_ton)
    clamp_offset = reference.time_add_s if reference else 0.0
    raw = base_cooling + clamp_offset
    final = max(raw, min_cooling)

    debug = CoolingDebug(
        option=option,
        grade_matched=True,
        matched_key=matched_key,
        effective_thickness_mm=eff_thickness,
        base_without_grade_extra=base_without_extra,
        grade_extra_s=grade_extra,
        base_cooling=base_cooling,
        clamp_force_reference_ton=reference.clamp_force_ton if reference else None,
        clamp_offset_s=clamp_offset,
        raw_cooling_with_clamp=raw,
        min_cooling_time_s=min_cooling,
        applied_min_cooling=raw < min_cooling,
        final_cooling=final,
    )
    return CoolingResult(value=final, debug=debug)


def compute_cooling_time(input_data: InputData, options: Options, tables) -> float:
    return compute_cooling_time_detailed(input_data, options, tables).value
