"""Mold-type rule engine: per-mold-type stage additions on top of the base times."""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from .models import STAGES, StageMap

CHANGE_EPSILON = 1e-9


@dataclass(frozen=True)
class MoldTypeAdjustment:
    """What a mold-type rule did to the stages."""
    mold_type: str
    time_add_s: float
    pack_zeroed: bool
    fill_add_s: Optional[float]
    deltas: Dict[str, float]
    affected_stages: Tuple[str, ...]


def find_rule(rules: Iterable, mold_type: str):
    for rule in rules or ():
        if rule.mold_type == mold_type:
            return rule
    return None


def apply_mold_type_adjustments(
    base: StageMap,
    mold_type: str,
    rules: Iterable
) -> Tuple[StageMap, Optional[MoldTypeAdjustment]]:
    """Apply the rule row for ``mold_type`` to the base stage times.

    Unknown mold types pass through unchanged. Otherwise pack may be zeroed,
    flagged stages get the generic time add (or their own addend from
    ``stage_add_s``), and fill moves only when the rule names a fill addend.

    Args:
        base: Stage times from the calculators
        mold_type: Mold type label
        rules: MoldTypeRule rows

    Returns:
        Tuple of (adjusted StageMap, MoldTypeAdjustment or None)
    """
    rule = find_rule(rules, mold_type)
    if rule is None:
        return base, None

    values = base.as_dict()
    if rule.pack_zero:
        values['pack'] = 0.0

    flagged = rule.flagged_stages()
    for stage in flagged:
        values[stage] += rule.stage_add_s.get(stage, rule.time_add_s)

    for stage, addend in rule.stage_add_s.items():
        if stage in values and stage not in flagged:
            values[stage] += addend

    adjusted = StageMap.from_dict(values).clamped()
    deltas = {stage: adjusted.get(stage) - base.get(stage) for stage in STAGES}
    affected = tuple(stage for stage in STAGES if abs(deltas[stage]) > CHANGE_EPSILON)

    return adjusted, MoldTypeAdjustment(
        mold_type=rule.mold_type,
        time_add_s=rule.time_add_s,
        pack_zeroed=rule.pack_zero,
        fill_add_s=rule.fill_add_s,
        deltas=deltas,
        affected_stages=affected,
    )
