"""Robot take-out time and the robot enable gate."""

from dataclasses import dataclass
from typing import Optional

from .lookups import approximate_lookup
from .models import InputData, Options, RobotOverrideReason
from .values import clamp_min_zero, first_present, to_number


@dataclass(frozen=True)
class RobotGate:
    """Whether the robot stage counts, and why not when it doesn't."""
    toggle: bool
    stroke_mm: float
    enabled: bool
    override_reason: Optional[str]


@dataclass(frozen=True)
class RobotResult:
    value: float
    lookup_s: float
    clamp_force_threshold: Optional[float]
    gate: RobotGate


def resolve_robot_gate(input_data: InputData, options: Options) -> RobotGate:
    """Robot runs only when toggled on AND it has a stroke.

    The toggle comes from the input record, then the options, then True.
    When both conditions fail the toggle is reported as the reason.
    """
    toggle = bool(first_present(input_data.robot_enabled, options.robot_enabled, default=True))
    stroke = to_number(options.robot_stroke_mm)
    if not toggle:
        reason = RobotOverrideReason.TOGGLE.value
    elif stroke <= 0:
        reason = RobotOverrideReason.STROKE.value
    else:
        reason = None
    return RobotGate(toggle=toggle, stroke_mm=stroke, enabled=reason is None, override_reason=reason)


def lookup_robot_time(clamp_force_ton: float, tables):
    """Clamp-force bin lookup, independent of any gate."""
    return approximate_lookup(
        tables.robot_time_by_clamp_force,
        clamp_min_zero(to_number(clamp_force_ton)),
        key=lambda r: r.min_clamp_force,
    )


def compute_robot_time_detailed(input_data: InputData, options: Options, tables) -> RobotResult:
    """Robot time, gated to 0 unless the robot is enabled.

    Args:
        input_data: Part / mold description (clamp force, robot toggle)
        options: Machine options (robot stroke, robot toggle)
        tables: TablesBundle

    Returns:
        RobotResult with the gated value, the raw bin value and the gate
    """
    row = lookup_robot_time(input_data.clamp_force_ton, tables)
    lookup_s = row.robot_time_s if row else 0.0
    gate = resolve_robot_gate(input_data, options)
    return RobotResult(
        value=lookup_s if gate.enabled else 0.0,
        lookup_s=lookup_s,
        clamp_force_threshold=row.min_clamp_force if row else None,
        gate=gate,
    )


def compute_robot_time(input_data: InputData, options: Options, tables) -> float:
    return compute_robot_time_detailed(input_data, options, tables).value
