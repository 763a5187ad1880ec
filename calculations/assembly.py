"""Total engine: mold rules, robot gate, safety factor and display rounding."""

from dataclasses import dataclass
from typing import Optional

from config import DEFAULT_ROUNDING_DIGITS, DEFAULT_SAFETY_FACTOR
from .models import InputData, Options, StageMap
from .mold_rules import MoldTypeAdjustment, apply_mold_type_adjustments
from .robot import RobotGate, resolve_robot_gate
from .values import first_present, fraction_or_percent, round_half_up, to_number


@dataclass(frozen=True)
class AssemblyResult:
    """Stage maps after each phase, plus the display values."""
    base: StageMap
    after_mold: StageMap
    after_robot: StageMap
    after_safety: StageMap
    display: StageMap
    raw_total: float
    total: float
    rounding: int
    safety_factor: float
    robot_gate: RobotGate
    mold_adjustment: Optional[MoldTypeAdjustment]


def resolve_safety_factor(options: Options, tables) -> float:
    """Safety factor as a 0-1 ratio: option, then tables default, then config."""
    raw = first_present(options.safety_factor, tables.defaults.safety_factor, default=DEFAULT_SAFETY_FACTOR)
    return fraction_or_percent(raw)


def resolve_rounding(tables) -> int:
    digits = first_present(tables.defaults.rounding, default=DEFAULT_ROUNDING_DIGITS)
    return max(0, int(to_number(digits, DEFAULT_ROUNDING_DIGITS)))


def apply_robot_gate(stages: StageMap, gate: RobotGate) -> StageMap:
    return stages if gate.enabled else stages.with_stage('robot', 0.0)


def apply_safety_factor(stages: StageMap, safety_factor: float) -> StageMap:
    """Scale every stage except robot by (1 + safety_factor)."""
    return stages.map(lambda stage, value: value if stage == 'robot' else value * (1 + safety_factor))


def assemble_stages(base: StageMap, input_data: InputData, options: Options, tables) -> AssemblyResult:
    """Run the four assembly phases over the base stage times.

    The displayed total is rounded from the unrounded after-safety sum, so
    it can differ slightly from the sum of the rounded stage values.

    Args:
        base: Calculator outputs (robot not yet gated)
        input_data: Part / mold description (mold type, robot toggle)
        options: Machine options (robot stroke, safety factor)
        tables: TablesBundle

    Returns:
        AssemblyResult with every phase
    """
    base = base.clamped()
    after_mold, adjustment = apply_mold_type_adjustments(base, input_data.mold_type, tables.mold_type_rules)

    gate = resolve_robot_gate(input_data, options)
    after_robot = apply_robot_gate(after_mold, gate)

    safety_factor = resolve_safety_factor(options, tables)
    after_safety = apply_safety_factor(after_robot, safety_factor)

    rounding = resolve_rounding(tables)
    display = after_safety.map(lambda _stage, value: round_half_up(value, rounding))
    raw_total = after_safety.total()

    return AssemblyResult(
        base=base,
        after_mold=after_mold,
        after_robot=after_robot,
        after_safety=after_safety,
        display=display,
        raw_total=raw_total,
        total=round_half_up(raw_total, rounding),
        rounding=rounding,
        safety_factor=safety_factor,
        robot_gate=gate,
        mold_adjustment=adjustment,
    )
