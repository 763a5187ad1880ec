"""Cycle time entry points: run every stage calculator and assemble the total."""

import logging
from dataclasses import dataclass
from typing import List

from .assembly import assemble_stages
from .cooling import compute_cooling_time_detailed
from .debug import CycleTimeDebug
from .defaults import normalize_input, normalize_options
from .fill_pack import compute_fill_pack_detailed
from .models import InputData, Options, Outputs, StageMap
from .open_close_eject import compute_open_close_eject_detailed
from .robot import compute_robot_time_detailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleTimeReport:
    """Display outputs together with the computation trace."""
    outputs: Outputs
    debug: CycleTimeDebug

    @property
    def total(self) -> float:
        return self.outputs.total


def _fallback_notes(input_data, fill_pack, cooling, oce, adjustment) -> List[str]:
    notes = []
    if adjustment is None:
        notes.append(f"No mold-type rule for '{input_data.mold_type}': base times kept")
    if not cooling.grade_matched:
        notes.append(
            f"No cooling grade for {input_data.resin} / {input_data.grade}: "
            f"minimum cooling time {cooling.min_cooling_time_s:g} s used"
        )
    if not fill_pack.density_matched:
        notes.append(f"No melt density for grade '{input_data.grade}': fill volume taken as zero")
    if not oce.clamp_control_matched:
        notes.append(f"Unknown clamp control '{oce.clamp_control}': first table row used")
    if not oce.open_close_mode_matched:
        notes.append(f"Unknown open/close speed mode '{oce.open_close_speed_mode}': first table row used")
    if not oce.ejecting_mode_matched:
        notes.append(f"Unknown ejecting speed mode '{oce.ejecting_speed_mode}': first table row used")
    return notes


def compute_cycle_time_with_debug(input_data: InputData, options: Options, tables) -> CycleTimeReport:
    """Compute the cycle time and keep every intermediate phase.

    Never raises for inputs in range: negative numbers are clamped to zero
    and missing lookup rows fall back to documented defaults, each listed
    in ``debug.fallbacks``.

    Args:
        input_data: Part / mold description
        options: Machine / process options
        tables: TablesBundle

    Returns:
        CycleTimeReport with display outputs and CycleTimeDebug
    """
    input_data = normalize_input(input_data)
    options = normalize_options(options)

    fill_pack = compute_fill_pack_detailed(input_data, options, tables)
    cooling = compute_cooling_time_detailed(input_data, options, tables)
    oce = compute_open_close_eject_detailed(input_data, options, tables)
    robot = compute_robot_time_detailed(input_data, options, tables)

    # Robot enters ungated; the assembly gate decides whether it counts
    base = StageMap(
        fill=fill_pack.fill,
        pack=fill_pack.pack,
        cool=cooling.value,
        open=oce.open,
        eject=oce.eject,
        robot=robot.lookup_s,
        close=oce.close,
    )
    assembled = assemble_stages(base, input_data, options, tables)

    fallbacks = _fallback_notes(input_data, fill_pack.debug, cooling.debug, oce.debug, assembled.mold_adjustment)
    for note in fallbacks:
        logger.debug(note)

    debug = CycleTimeDebug(
        base=assembled.base,
        after_mold=assembled.after_mold,
        after_robot=assembled.after_robot,
        after_safety=assembled.after_safety,
        display=assembled.display,
        rounding=assembled.rounding,
        safety_factor=assembled.safety_factor,
        raw_total=assembled.raw_total,
        total=assembled.total,
        robot_gate=assembled.robot_gate,
        robot_lookup_s=robot.lookup_s,
        robot_clamp_force_threshold=robot.clamp_force_threshold,
        mold_adjustment=assembled.mold_adjustment,
        fill_pack=fill_pack.debug,
        cooling=cooling.debug,
        open_close_eject=oce.debug,
        fallbacks=tuple(fallbacks),
    )
    return CycleTimeReport(outputs=Outputs.from_stages(assembled.display, assembled.total), debug=debug)


def compute_cycle_time(input_data: InputData, options: Options, tables) -> Outputs:
    """Display stage times and total, without the trace."""
    return compute_cycle_time_with_debug(input_data, options, tables).outputs


def calculate_shots_per_hour(cycle_time_s: float) -> float:
    """Calculate number of shots per hour.

    Args:
        cycle_time_s: Cycle time in seconds

    Returns:
        Shots per hour
    """
    if cycle_time_s <= 0:
        return 0
    return 3600 / cycle_time_s


def calculate_parts_per_hour(cycle_time_s: float, cavities: int = 1) -> float:
    """Calculate number of parts per hour.

    Args:
        cycle_time_s: Cycle time in seconds
        cavities: Number of cavities

    Returns:
        Parts per hour
    """
    return calculate_shots_per_hour(cycle_time_s) * cavities
