"""Mold open, close and eject times from stroke geometry and speed profiles."""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .lookups import approximate_lookup, lookup_by_key
from .models import InputData, Options
from .values import clamp_min_zero, to_number

logger = logging.getLogger(__name__)

LOW_SPEED_FACTOR = 30
MID_SPEED_FACTOR = 40
EJECT_LOW_SPEED_FACTOR = 15

OPEN_TRAILING_PERCENT = 50
CLOSE_TRAILING_PERCENT = 30
EJECT_BASE_PERCENTS = (40, 60, 60, 50)

# Fixed lengths of the first and third open/close segments, in mm
BREAKAWAY_DISTANCE_MM = 20
STROKE_RESERVED_MM = 40


@dataclass(frozen=True)
class OpenCloseEjectDebug:
    """Stroke, segment and bin selections behind open/close/eject."""
    total_stroke_mm: float
    open_close_stroke_option_mm: float  # carried for display only
    clamp_control: str
    clamp_control_matched: bool
    clamp_percent: float
    open_close_speed_mode: str
    open_close_mode_matched: bool
    open_close_speed_factor: float
    open_close_distances_mm: Tuple[float, ...]
    open_percents: Tuple[float, ...]
    close_percents: Tuple[float, ...]
    open_base_s: float
    close_base_s: float
    clamp_force_adder_threshold: Optional[float]
    open_add_s: float
    close_add_s: float
    eject_add_s: float
    ejecting_speed_mode: str
    ejecting_mode_matched: bool
    ejecting_speed_factor: float
    eject_distances_mm: Tuple[float, ...]
    eject_percents: Tuple[float, ...]
    eject_multiplier_stroke_mm: Optional[float]
    eject_multiplier: float
    eject_base_s: float


@dataclass(frozen=True)
class OpenCloseEjectResult:
    open: float
    close: float
    eject: float
    debug: OpenCloseEjectDebug


def compute_total_stroke(input_data: InputData, options: Options) -> float:
    """Opening stroke: sprue + 3P pin runner + eject + robot + protection + height."""
    pin_runner = to_number(options.pin_runner_3p_mm) if input_data.is_three_plate else 0.0
    total = (
        to_number(options.sprue_length_mm)
        + pin_runner
        + to_number(options.eject_stroke_mm)
        + to_number(options.robot_stroke_mm)
        + to_number(options.mold_protection_mm)
        + to_number(input_data.height_mm_eject)
    )
    return clamp_min_zero(total)


def open_close_percents(speed_factor: float, clamp_percent: float, opening: bool) -> Tuple[float, ...]:
    """Percent of max speed for each of the four open or close segments."""
    trailing = OPEN_TRAILING_PERCENT if opening else CLOSE_TRAILING_PERCENT
    if speed_factor == MID_SPEED_FACTOR:
        return (MID_SPEED_FACTOR, MID_SPEED_FACTOR, MID_SPEED_FACTOR, trailing)
    if speed_factor == LOW_SPEED_FACTOR:
        return (LOW_SPEED_FACTOR, LOW_SPEED_FACTOR, LOW_SPEED_FACTOR, trailing)
    if opening:
        return (40, clamp_percent, 60, 50)
    return (30, clamp_percent, 50, 30)


def eject_percents(speed_factor: float) -> Tuple[float, ...]:
    if speed_factor == EJECT_LOW_SPEED_FACTOR:
        return (EJECT_LOW_SPEED_FACTOR,) * 4
    return EJECT_BASE_PERCENTS


def open_close_distances(total_stroke: float, protection: float) -> Tuple[float, ...]:
    middle = max(0.0, total_stroke - protection - STROKE_RESERVED_MM)
    return (BREAKAWAY_DISTANCE_MM, middle, BREAKAWAY_DISTANCE_MM, protection)


def segment_time(distance: float, percent: float, max_speed: float) -> float:
    """Time for one segment; 0 when any input is not positive."""
    if distance <= 0 or percent <= 0 or max_speed <= 0:
        return 0.0
    return distance / ((percent / 100) * max_speed)


def _segments_time(distances, percents, max_speed) -> float:
    return sum(segment_time(d, p, max_speed) for d, p in zip(distances, percents))


def _speed_mode(rows, mode: str, label: str):
    row, matched = lookup_by_key(rows, mode, key=lambda r: r.mode)
    if not matched:
        logger.debug("Unknown %s speed mode %r, using first table row", label, mode)
    factor = row.speed_factor if row else 1.0
    return factor, matched


def compute_open_close_eject_detailed(input_data: InputData, options: Options, tables) -> OpenCloseEjectResult:
    """Open, close and eject times with segment and bin details.

    Args:
        input_data: Part / mold description (clamp force, height, plate type)
        options: Machine options (strokes, clamp control, speed modes)
        tables: TablesBundle

    Returns:
        OpenCloseEjectResult with open, close, eject and OpenCloseEjectDebug
    """
    defaults = tables.defaults
    clamp_force = clamp_min_zero(to_number(input_data.clamp_force_ton))
    protection = clamp_min_zero(to_number(options.mold_protection_mm))
    eject_stroke = clamp_min_zero(to_number(options.eject_stroke_mm))

    total_stroke = compute_total_stroke(input_data, options)

    control, control_matched = lookup_by_key(
        tables.clamp_control_table, options.clamp_control, key=lambda r: r.clamp_control)
    if not control_matched:
        logger.debug("Unknown clamp control %r, using first table row", options.clamp_control)
    clamp_percent = control.closing_speed_percent if control else 0.0

    oc_factor, oc_matched = _speed_mode(tables.open_close_speed_control, options.open_close_speed_mode, 'open/close')
    distances = open_close_distances(total_stroke, protection)
    open_pcts = open_close_percents(oc_factor, clamp_percent, opening=True)
    close_pcts = open_close_percents(oc_factor, clamp_percent, opening=False)
    open_base = _segments_time(distances, open_pcts, defaults.open_close_max_speed)
    close_base = _segments_time(distances, close_pcts, defaults.open_close_max_speed)

    adder = approximate_lookup(
        tables.clamp_force_stage_adders, clamp_force, key=lambda r: r.clamp_force_threshold)
    open_add = adder.open_add_s if adder else 0.0
    close_add = adder.close_add_s if adder else 0.0
    eject_add = adder.eject_add_s if adder else 0.0

    ej_factor, ej_matched = _speed_mode(tables.ejecting_speed_control, options.ejecting_speed_mode, 'ejecting')
    eject_distances = (eject_stroke / 4,) * 4
    ej_pcts = eject_percents(ej_factor)
    eject_base = _segments_time(eject_distances, ej_pcts, defaults.ejector_max_speed)

    multiplier_row = approximate_lookup(
        tables.eject_stroke_multipliers, eject_stroke, key=lambda r: r.eject_stroke_mm)
    multiplier = multiplier_row.multiplier if multiplier_row else 1.0

    debug = OpenCloseEjectDebug(
        total_stroke_mm=total_stroke,
        open_close_stroke_option_mm=clamp_min_zero(to_number(options.open_close_stroke_mm)),
        clamp_control=options.clamp_control,
        clamp_control_matched=control_matched,
        clamp_percent=clamp_percent,
        open_close_speed_mode=options.open_close_speed_mode,
        open_close_mode_matched=oc_matched,
        open_close_speed_factor=oc_factor,
        open_close_distances_mm=distances,
        open_percents=open_pcts,
        close_percents=close_pcts,
        open_base_s=open_base,
        close_base_s=close_base,
        clamp_force_adder_threshold=adder.clamp_force_threshold if adder else None,
        open_add_s=open_add,
        close_add_s=close_add,
        eject_add_s=eject_add,
        ejecting_speed_mode=options.ejecting_speed_mode,
        ejecting_mode_matched=ej_matched,
        ejecting_speed_factor=ej_factor,
        eject_distances_mm=eject_distances,
        eject_percents=ej_pcts,
        eject_multiplier_stroke_mm=multiplier_row.eject_stroke_mm if multiplier_row else None,
        eject_multiplier=multiplier,
        eject_base_s=eject_base,
    )
    return OpenCloseEjectResult(
        open=clamp_min_zero(open_base + open_add),
        close=clamp_min_zero(close_base + close_add),
        eject=clamp_min_zero(eject_base * multiplier + eject_add),
        debug=debug,
    )


def compute_open_time(input_data: InputData, options: Options, tables) -> float:
    return compute_open_close_eject_detailed(input_data, options, tables).open


def compute_close_time(input_data: InputData, options: Options, tables) -> float:
    return compute_open_close_eject_detailed(input_data, options, tables).close


def compute_eject_time(input_data: InputData, options: Options, tables) -> float:
    return compute_open_close_eject_detailed(input_data, options, tables).eject
