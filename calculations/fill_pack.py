"""Fill and pack time calculations (Fill_Pack sheet)."""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from config import MIN_FILL_TIME_S
from .lookups import excel_match, excel_vlookup
from .models import InputData, Options
from .values import clamp_min_zero, first_present, to_number

logger = logging.getLogger(__name__)

RUNNER_WEIGHT_RATIO = 0.12   # runner weight as a share of all-cavity weight
GATE_RUNNER_SHARE = 0.7
PLUNGER_FACTOR = 3.3         # plunger diameter = 3.3 * sqrt(clamp force)
STROKE_ALLOWANCE = 1.08


@dataclass(frozen=True)
class FillPackDebug:
    """Intermediate cells of the fill/pack chain."""
    all_cav_weight_g: float
    runner_weight_g: float
    total_weight_g: float
    melt_density_g_cm3: float
    density_matched: bool
    all_volume_cm3: float
    plunger_diameter_mm: float
    screw_area_cm2: float
    weighting_distance_mm: float
    required_stroke_mm: float
    runner_bin_index: Optional[int]
    vp_lookup_value: Optional[float]
    capped_stroke_mm: float
    ram_volume_cm3: float
    injection_rate_cm3_s: float
    raw_fill_s: float
    applied_min_fill: bool
    no_pack_applied: bool


@dataclass(frozen=True)
class FillPackResult:
    fill: float
    pack: float
    debug: FillPackDebug


def find_melt_density(grade: str, tables) -> Optional[float]:
    """Melt density for a grade, matched on the grade name only."""
    for row in tables.cooling_grades:
        if row.grade == grade:
            return row.melt_density_g_cm3
    return None


def compute_pack_time(input_data: InputData, tables) -> float:
    """Pack (holding) time.

    Args:
        input_data: Part / mold description
        tables: TablesBundle

    Returns:
        Pack time in seconds; exactly 0 for the no-pack mold type
    """
    consts = tables.fill_pack
    if input_data.mold_type == consts.no_pack_mold_type:
        return 0.0
    all_cav_weight = clamp_min_zero(to_number(input_data.weight_g_1cav)) * to_number(input_data.cavity)
    return consts.pack_coefficient * clamp_min_zero(all_cav_weight) ** 0.25 + consts.pack_constant


def compute_fill_pack_detailed(input_data: InputData, options: Options, tables) -> FillPackResult:
    """Fill and pack time with every intermediate value.

    The shot volume is pushed through a plunger sized from the clamp force;
    the stroke is capped by the V/P bin for the shot weight and the fill time
    is that ram volume over the injection rate, never below 0.92 s.

    Args:
        input_data: Part / mold description
        options: Machine options (injection speed, cushion)
        tables: TablesBundle

    Returns:
        FillPackResult with fill, pack and FillPackDebug
    """
    consts = tables.fill_pack
    weight = clamp_min_zero(to_number(input_data.weight_g_1cav))
    cavity = clamp_min_zero(to_number(input_data.cavity))
    clamp_force = clamp_min_zero(to_number(input_data.clamp_force_ton))
    speed = clamp_min_zero(to_number(options.injection_speed_mm_s))
    cushion = to_number(first_present(options.cushion_distance_mm, consts.default_cushion_mm))
    gate = consts.gate_factor

    all_cav_weight = weight * cavity
    runner_base = RUNNER_WEIGHT_RATIO * all_cav_weight
    runner_extra = (runner_base * gate - runner_base) * GATE_RUNNER_SHARE
    runner_weight = 0.0 if gate == 0 else runner_base + runner_extra
    total_weight = runner_weight + all_cav_weight

    density = find_melt_density(input_data.grade, tables)
    density_matched = density is not None and density > 0
    if not density_matched:
        logger.debug("No melt density for grade %r, fill volume taken as zero", input_data.grade)
    all_volume = total_weight / density if density_matched else 0.0

    plunger = PLUNGER_FACTOR * math.sqrt(clamp_force)
    area = math.pi * plunger ** 2 / 4 * 0.01
    weighting = (all_volume / area * 10 if area > 0 else 0.0) + cushion
    required_stroke = weighting * STROKE_ALLOWANCE

    bin_index = excel_match(weight, consts.runner_weight_bins, 1)
    vp_value = excel_vlookup(bin_index, consts.vp_lookup, 2, True) if bin_index is not None else None
    vp_limit = to_number(vp_value, required_stroke)
    capped_stroke = min(required_stroke, vp_limit)

    ram_volume = area * capped_stroke * 0.1
    rate = math.pi * plunger ** 2 * speed * 0.001 / 4
    raw_fill = ram_volume / rate if rate > 0 else 0.0
    fill = max(raw_fill, MIN_FILL_TIME_S)

    pack = compute_pack_time(input_data, tables)

    debug = FillPackDebug(
        all_cav_weight_g=all_cav_weight,
        runner_weight_g=runner_weight,
        total_weight_g=total_weight,
        melt_density_g_cm3=density or 0.0,
        density_matched=density_matched,
        all_volume_cm3=all_volume,
        plunger_diameter_mm=plunger,
        screw_area_cm2=area,
        weighting_distance_mm=weighting,
        required_stroke_mm=required_stroke,
        runner_bin_index=bin_index,
        vp_lookup_value=to_number(vp_value, None) if vp_value is not None else None,
        capped_stroke_mm=capped_stroke,
        ram_volume_cm3=ram_volume,
        injection_rate_cm3_s=rate,
        raw_fill_s=raw_fill,
        applied_min_fill=raw_fill < MIN_FILL_TIME_S,
        no_pack_applied=input_data.mold_type == consts.no_pack_mold_type,
    )
    return FillPackResult(fill=fill, pack=pack, debug=debug)


def compute_fill_time(input_data: InputData, options: Options, tables) -> float:
    return compute_fill_pack_detailed(input_data, options, tables).fill
