"""Read-only snapshot of one cycle time computation."""

from dataclasses import asdict, dataclass
from typing import List, Optional, Tuple

from .cooling import CoolingDebug
from .fill_pack import FillPackDebug
from .models import STAGES, StageMap
from .mold_rules import MoldTypeAdjustment
from .open_close_eject import OpenCloseEjectDebug
from .robot import RobotGate


@dataclass(frozen=True)
class CycleTimeDebug:
    """Every phase of the assembly plus the calculator sub-traces.

    Built once at the end of a computation and never changed afterwards.
    """
    base: StageMap
    after_mold: StageMap
    after_robot: StageMap
    after_safety: StageMap
    display: StageMap
    rounding: int
    safety_factor: float
    raw_total: float
    total: float
    robot_gate: RobotGate
    robot_lookup_s: float
    robot_clamp_force_threshold: Optional[float]
    mold_adjustment: Optional[MoldTypeAdjustment]
    fill_pack: FillPackDebug
    cooling: CoolingDebug
    open_close_eject: OpenCloseEjectDebug
    fallbacks: Tuple[str, ...] = ()

    @property
    def display_stage_sum(self) -> float:
        """Sum of the rounded stage values (may differ from ``total``)."""
        return self.display.total()

    def stage_rows(self) -> List[tuple]:
        """(stage, base, after_mold, after_robot, after_safety, display) per stage."""
        phases = (self.base, self.after_mold, self.after_robot, self.after_safety, self.display)
        return [(stage,) + tuple(p.get(stage) for p in phases) for stage in STAGES]

    def to_dict(self) -> dict:
        data = asdict(self)
        data['display_stage_sum'] = self.display_stage_sum
        return data
