"""Derived option values: auto eject stroke, sprue and pin-runner lengths.

Also normalizes inputs at the engine boundary so the calculators never see
negative dimensions or values outside the closed enumerations.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from .models import (
    ALLOWED_CAVITIES, DEFAULT_CAVITY, DEFAULT_PLATE_TYPE, PLATE_TYPES,
    InputData, Options, PlateType
)
from .values import clamp_min_zero, to_number

logger = logging.getLogger(__name__)

PIN_RUNNER_EXTRA_MM = 30


@dataclass(frozen=True)
class EjectStrokeSetting:
    value: float
    is_manual: bool


def compute_default_eject_stroke(height_mm: float, tables) -> float:
    """Auto eject stroke for a part height.

    Short parts get the minimum stroke; taller ones get height × factor.
    """
    defaults = tables.defaults
    height = clamp_min_zero(to_number(height_mm))
    if height < defaults.eject_stroke_height_threshold_mm:
        return defaults.eject_stroke_min_mm
    return height * defaults.eject_stroke_height_factor


def maybe_apply_auto_eject_stroke(
    height_mm: float,
    current_stroke_mm: float,
    is_manual: bool,
    tables
) -> EjectStrokeSetting:
    """Keep a manual stroke, otherwise follow the height."""
    if is_manual:
        return EjectStrokeSetting(value=to_number(current_stroke_mm), is_manual=True)
    return EjectStrokeSetting(value=compute_default_eject_stroke(height_mm, tables), is_manual=False)


def reset_eject_stroke_to_auto(height_mm: float, tables) -> EjectStrokeSetting:
    return EjectStrokeSetting(value=compute_default_eject_stroke(height_mm, tables), is_manual=False)


def apply_eject_stroke_setting(options: Options, height_mm: float, tables) -> Options:
    setting = maybe_apply_auto_eject_stroke(
        height_mm, options.eject_stroke_mm, options.eject_stroke_is_manual, tables)
    return replace(options, eject_stroke_mm=setting.value, eject_stroke_is_manual=setting.is_manual)


def select_sprue_length(weight_g: float, bins: Sequence) -> Optional[float]:
    """Sprue length of the first bin whose max weight covers ``weight_g``.

    Weights above every bin take the largest bin. Returns None for no bins.
    """
    ordered = sorted(bins or (), key=lambda b: b.max_weight)
    if not ordered:
        return None
    weight = to_number(weight_g)
    for sprue_bin in ordered:
        if weight <= sprue_bin.max_weight:
            return sprue_bin.sprue
    return ordered[-1].sprue


def derive_sprue_length(plate_type: str, weight_g: float, bins: Sequence, current: float = 0.0) -> float:
    """Sprue length for a plate type; hot runner molds have none."""
    if plate_type == PlateType.HOT_RUNNER.value:
        return 0.0
    selected = select_sprue_length(weight_g, bins)
    return selected if selected is not None else to_number(current)


def derive_pin_runner(plate_type: str, sprue_length_mm: float) -> float:
    if plate_type == PlateType.THREE_PLATE.value:
        return to_number(sprue_length_mm) + PIN_RUNNER_EXTRA_MM
    return 0.0


def should_lock_pin_runner(plate_type: str) -> bool:
    return plate_type != PlateType.THREE_PLATE.value


def should_lock_sprue_length(plate_type: str) -> bool:
    return plate_type == PlateType.HOT_RUNNER.value


def apply_runner_lengths(options: Options, input_data: InputData, tables) -> Options:
    """Options with sprue and pin-runner lengths derived from plate type + weight."""
    sprue = derive_sprue_length(
        input_data.plate_type, input_data.weight_g_1cav, tables.sprue_length_by_weight,
        current=options.sprue_length_mm,
    )
    return replace(options, sprue_length_mm=sprue, pin_runner_3p_mm=derive_pin_runner(input_data.plate_type, sprue))


def normalize_input(input_data: InputData) -> InputData:
    """Clamp negative numbers to 0 and replace unknown cavity / plate values."""
    cavity = to_number(input_data.cavity, None)
    if cavity is None or cavity not in ALLOWED_CAVITIES:
        logger.debug("Cavity %r not allowed, using %d", input_data.cavity, DEFAULT_CAVITY)
        cavity = DEFAULT_CAVITY

    plate_type = input_data.plate_type
    if plate_type not in PLATE_TYPES:
        logger.debug("Plate type %r unknown, using %s", plate_type, DEFAULT_PLATE_TYPE)
        plate_type = DEFAULT_PLATE_TYPE

    return replace(
        input_data,
        cavity=int(cavity),
        plate_type=plate_type,
        weight_g_1cav=clamp_min_zero(to_number(input_data.weight_g_1cav)),
        clamp_force_ton=clamp_min_zero(to_number(input_data.clamp_force_ton)),
        thickness_mm=clamp_min_zero(to_number(input_data.thickness_mm)),
        height_mm_eject=clamp_min_zero(to_number(input_data.height_mm_eject)),
    )


_LENGTH_OPTIONS = (
    'mold_protection_mm', 'eject_stroke_mm', 'cushion_distance_mm', 'robot_stroke_mm',
    'vp_position_mm', 'sprue_length_mm', 'pin_runner_3p_mm', 'injection_speed_mm_s',
    'open_close_stroke_mm',
)


def normalize_options(options: Options) -> Options:
    """Clamp negative lengths and speeds to 0; coerce numeric strings."""
    changes = {name: clamp_min_zero(to_number(getattr(options, name))) for name in _LENGTH_OPTIONS}
    return replace(options, **changes)
