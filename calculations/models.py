"""Value types for the cycle time engine: inputs, options and stage maps."""

import enum
from dataclasses import dataclass, asdict, fields, replace
from typing import Callable, Dict, Optional, Tuple


class PlateType(enum.Enum):
    """Mold plate construction."""
    TWO_PLATE = "2P"
    THREE_PLATE = "3P"
    HOT_RUNNER = "HOT"


class CoolingOption(enum.Enum):
    """Cooling time model selection."""
    BASE = "BASE"    # Stepped thickness table + grade extra seconds
    LOGIC = "LOGIC"  # Raw thickness, no grade extra


class RobotOverrideReason(enum.Enum):
    """Why the robot stage was forced to zero."""
    TOGGLE = "toggle"
    STROKE = "stroke"


STAGES: Tuple[str, ...] = ('fill', 'pack', 'cool', 'open', 'eject', 'robot', 'close')
PLATE_TYPES: Tuple[str, ...] = tuple(p.value for p in PlateType)
ALLOWED_CAVITIES: Tuple[int, ...] = (1, 2, 4, 6, 8)
COOLING_OPTIONS: Tuple[str, ...] = tuple(c.value for c in CoolingOption)

DEFAULT_CAVITY = ALLOWED_CAVITIES[0]
DEFAULT_PLATE_TYPE = PlateType.TWO_PLATE.value


@dataclass(frozen=True)
class InputData:
    """Physical part / mold description."""
    mold_type: str = ''
    resin: str = ''
    grade: str = ''
    cavity: int = DEFAULT_CAVITY
    weight_g_1cav: float = 0.0
    clamp_force_ton: float = 0.0
    thickness_mm: float = 0.0
    height_mm_eject: float = 0.0
    plate_type: str = DEFAULT_PLATE_TYPE
    robot_enabled: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'InputData':
        """Build an input record from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @property
    def total_weight_g(self) -> float:
        """Weight of all cavities (runner excluded)."""
        return self.weight_g_1cav * self.cavity

    @property
    def is_three_plate(self) -> bool:
        return self.plate_type == PlateType.THREE_PLATE.value


@dataclass(frozen=True)
class Options:
    """Machine / process configuration.

    ``safety_factor`` of None means "use the tables bundle default".
    ``robot_enabled`` of None defers to the input record, then to True.
    """
    clamp_control: str = 'Logic valve'
    mold_protection_mm: float = 120.0
    eject_stroke_mm: float = 45.0
    eject_stroke_is_manual: bool = False
    cushion_distance_mm: float = 8.0
    robot_stroke_mm: float = 100.0
    vp_position_mm: float = 10.0
    sprue_length_mm: float = 70.0
    pin_runner_3p_mm: float = 0.0
    injection_speed_mm_s: float = 20.0
    open_close_stroke_mm: float = 0.0
    open_close_speed_mode: str = 'Base speed'
    ejecting_speed_mode: str = 'Base speed'
    cooling_option: str = CoolingOption.BASE.value
    safety_factor: Optional[float] = None
    robot_enabled: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'Options':
        """Build options from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def merged(self, **changes) -> 'Options':
        return replace(self, **changes)


@dataclass(frozen=True)
class StageMap:
    """Durations (seconds) of the seven molding stages. Always complete."""
    fill: float = 0.0
    pack: float = 0.0
    cool: float = 0.0
    open: float = 0.0
    eject: float = 0.0
    robot: float = 0.0
    close: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> 'StageMap':
        return cls(**{stage: float(data.get(stage, 0.0) or 0.0) for stage in STAGES})

    def get(self, stage: str) -> float:
        return getattr(self, stage)

    def with_stage(self, stage: str, value: float) -> 'StageMap':
        return replace(self, **{stage: value})

    def map(self, fn: Callable[[str, float], float]) -> 'StageMap':
        """Return a new map with ``fn(stage, value)`` applied to every stage."""
        return StageMap(**{stage: fn(stage, self.get(stage)) for stage in STAGES})

    def clamped(self) -> 'StageMap':
        """Return a copy with negative durations raised to zero."""
        return self.map(lambda _stage, value: max(0.0, value))

    def total(self) -> float:
        return sum(self.get(stage) for stage in STAGES)

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class Outputs:
    """Display (rounded) stage durations and total."""
    fill: float
    pack: float
    cool: float
    open: float
    eject: float
    robot: float
    close: float
    total: float

    @classmethod
    def from_stages(cls, stages: StageMap, total: float) -> 'Outputs':
        return cls(total=total, **stages.as_dict())

    @property
    def stages(self) -> StageMap:
        return StageMap(**{stage: getattr(self, stage) for stage in STAGES})

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)
