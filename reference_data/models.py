"""Typed rows for the workbook lookup tables and the bundle that carries them."""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from calculations.mold_rules import find_rule
from calculations.values import is_number, to_number
from config import (
    DEFAULT_EJECTOR_MAX_SPEED, DEFAULT_MIN_COOLING_TIME_S, DEFAULT_OPEN_CLOSE_MAX_SPEED,
    DEFAULT_ROUNDING_DIGITS, DEFAULT_SAFETY_FACTOR
)


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().upper() in ('1', 'TRUE', 'Y', 'YES', 'O')
    return bool(value)


@dataclass(frozen=True)
class MoldTypeRule:
    """Per-mold-type stage adjustments (CT_FINAL rule columns).

    ``time_add_s`` goes to every flagged stage. ``stage_add_s`` holds
    stage-specific addends; a stage listed there takes that value instead
    of the generic one. Fill only ever moves through ``stage_add_s``.
    """
    mold_type: str
    time_add_s: float = 0.0
    pack_zero: bool = False
    pack_plus: bool = False
    cool_plus: bool = False
    open_plus: bool = False
    close_plus: bool = False
    stage_add_s: Mapping[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> 'MoldTypeRule':
        stage_adds = {}
        for stage, raw in (data.get('stage_add_s') or {}).items():
            value = to_number(raw, None)
            if value is not None:
                stage_adds[stage] = value
        # Older exports carry the fill addend as its own column
        if is_number(data.get('fill_add_s')) and 'fill' not in stage_adds:
            stage_adds['fill'] = float(data['fill_add_s'])
        return cls(
            mold_type=str(data.get('mold_type', '')),
            time_add_s=to_number(data.get('time_add_s')),
            pack_zero=_flag(data.get('pack_zero', False)),
            pack_plus=_flag(data.get('pack_plus', False)),
            cool_plus=_flag(data.get('cool_plus', False)),
            open_plus=_flag(data.get('open_plus', False)),
            close_plus=_flag(data.get('close_plus', False)),
            stage_add_s=MappingProxyType(stage_adds),
        )

    @property
    def fill_add_s(self) -> Optional[float]:
        return self.stage_add_s.get('fill')

    def flagged_stages(self) -> Tuple[str, ...]:
        """Stages that receive the generic time add."""
        flags = (
            ('pack', self.pack_plus),
            ('cool', self.cool_plus),
            ('open', self.open_plus),
            ('close', self.close_plus),
        )
        return tuple(stage for stage, on in flags if on)


@dataclass(frozen=True)
class CoolingGrade:
    """Thermal constants for one resin + grade (Cooling sheet B29:M79)."""
    resin: str
    grade: str
    tm: float          # melt temperature (°C)
    tw: float          # mold wall temperature (°C)
    te: float          # ejection temperature (°C)
    alpha: float       # thermal diffusivity (mm²/s)
    extra_s: float = 0.0
    melt_density_g_cm3: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> 'CoolingGrade':
        return cls(
            resin=str(data.get('resin', '')),
            grade=str(data.get('grade', '')),
            tm=to_number(data.get('tm')),
            tw=to_number(data.get('tw')),
            te=to_number(data.get('te')),
            alpha=to_number(data.get('alpha')),
            extra_s=to_number(data.get('extra_s')),
            melt_density_g_cm3=to_number(data.get('melt_density_g_cm3')),
        )

    @property
    def key(self) -> str:
        return f"{self.resin}||{self.grade}"


@dataclass(frozen=True)
class ClampForceReference:
    clamp_force_ton: float
    time_add_s: float


@dataclass(frozen=True)
class ThicknessStep:
    input_mm: float
    effective_mm: float


@dataclass(frozen=True)
class ClampControl:
    clamp_control: str
    closing_speed_percent: float


@dataclass(frozen=True)
class SpeedMode:
    mode: str
    speed_factor: float


@dataclass(frozen=True)
class ClampForceAdder:
    clamp_force_threshold: float
    open_add_s: float = 0.0
    close_add_s: float = 0.0
    eject_add_s: float = 0.0


@dataclass(frozen=True)
class EjectStrokeMultiplier:
    eject_stroke_mm: float
    multiplier: float


@dataclass(frozen=True)
class RobotTime:
    min_clamp_force: float
    robot_time_s: float


@dataclass(frozen=True)
class SprueBin:
    max_weight: float
    sprue: float


@dataclass(frozen=True)
class FillPackConstants:
    """Fill_Pack sheet constants and the V/P bins."""
    no_pack_mold_type: str = 'Gas INJ.'
    pack_coefficient: float = 0.6    # P28
    pack_constant: float = 1.0       # K16
    gate_factor: float = 1.0         # E15
    default_cushion_mm: float = 0.0  # K19
    runner_weight_bins: Tuple[float, ...] = ()
    vp_lookup: Tuple[Tuple[float, float], ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> 'FillPackConstants':
        return cls(
            no_pack_mold_type=str(data.get('no_pack_mold_type', 'Gas INJ.')),
            pack_coefficient=to_number(data.get('pack_coefficient'), 0.6),
            pack_constant=to_number(data.get('pack_constant'), 1.0),
            gate_factor=to_number(data.get('gate_factor'), 1.0),
            default_cushion_mm=to_number(data.get('default_cushion_mm')),
            runner_weight_bins=tuple(to_number(v) for v in data.get('runner_weight_bins') or []),
            vp_lookup=tuple((to_number(r[0]), to_number(r[1])) for r in data.get('vp_lookup') or [] if len(r) >= 2),
        )


@dataclass(frozen=True)
class TableDefaults:
    """Engine-wide values carried by the tables, falling back to config."""
    rounding: int = DEFAULT_ROUNDING_DIGITS
    safety_factor: float = DEFAULT_SAFETY_FACTOR
    min_cooling_time_s: float = DEFAULT_MIN_COOLING_TIME_S
    open_close_max_speed: float = DEFAULT_OPEN_CLOSE_MAX_SPEED
    ejector_max_speed: float = DEFAULT_EJECTOR_MAX_SPEED
    eject_stroke_min_mm: float = 45.0
    eject_stroke_height_threshold_mm: float = 31.0
    eject_stroke_height_factor: float = 1.5

    @classmethod
    def from_dict(cls, data: dict) -> 'TableDefaults':
        base = cls()
        values = {}
        for name in base.__dataclass_fields__:
            fallback = getattr(base, name)
            values[name] = to_number(data.get(name), fallback)
        values['rounding'] = int(values['rounding'])
        return cls(**values)


def _rows(items: Optional[List[dict]], row_type, *names: str) -> tuple:
    """Build simple numeric/string rows positionally from named dict keys."""
    built = []
    for item in items or []:
        values = []
        for name in names:
            raw = item.get(name)
            values.append(raw if isinstance(raw, str) and not is_number(to_number(raw, None)) else to_number(raw))
        built.append(row_type(*values))
    return tuple(built)


@dataclass(frozen=True)
class TablesBundle:
    """Every lookup table the engine reads, immutable for a computation.

    Passed explicitly into each engine call so several table versions can be
    used side by side.
    """
    mold_type_rules: Tuple[MoldTypeRule, ...] = ()
    cooling_grades: Tuple[CoolingGrade, ...] = ()
    resin_aliases: Mapping[str, str] = field(default_factory=dict)
    clamp_force_reference: Tuple[ClampForceReference, ...] = ()
    thickness_reference: Tuple[ThicknessStep, ...] = ()
    clamp_control_table: Tuple[ClampControl, ...] = ()
    open_close_speed_control: Tuple[SpeedMode, ...] = ()
    ejecting_speed_control: Tuple[SpeedMode, ...] = ()
    clamp_force_stage_adders: Tuple[ClampForceAdder, ...] = ()
    eject_stroke_multipliers: Tuple[EjectStrokeMultiplier, ...] = ()
    robot_time_by_clamp_force: Tuple[RobotTime, ...] = ()
    sprue_length_by_weight: Tuple[SprueBin, ...] = ()
    fill_pack: FillPackConstants = field(default_factory=FillPackConstants)
    defaults: TableDefaults = field(default_factory=TableDefaults)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TablesBundle':
        """Build a bundle from plain structured data (the JSON file contents)."""
        cooling = data.get('cooling') or {}
        defaults = dict(data.get('defaults') or {})
        if 'min_cooling_time_s' in cooling and 'min_cooling_time_s' not in defaults:
            defaults['min_cooling_time_s'] = cooling['min_cooling_time_s']

        return cls(
            mold_type_rules=tuple(MoldTypeRule.from_dict(r) for r in data.get('mold_type_rules') or []),
            cooling_grades=tuple(CoolingGrade.from_dict(r) for r in data.get('cooling_grade_params') or []),
            resin_aliases=MappingProxyType(
                {str(k): str(v) for k, v in (data.get('resin_aliases') or {}).items()}),
            clamp_force_reference=_rows(
                cooling.get('clamp_force_reference'), ClampForceReference, 'clamp_force_ton', 'time_add_s'),
            thickness_reference=_rows(
                cooling.get('thickness_reference'), ThicknessStep, 'input_mm', 'effective_mm'),
            clamp_control_table=_rows(
                data.get('clamp_control_table'), ClampControl, 'clamp_control', 'closing_speed_percent'),
            open_close_speed_control=_rows(
                data.get('open_close_speed_control'), SpeedMode, 'mode', 'speed_factor'),
            ejecting_speed_control=_rows(
                data.get('ejecting_speed_control'), SpeedMode, 'mode', 'speed_factor'),
            clamp_force_stage_adders=_rows(
                data.get('clamp_force_stage_adders'), ClampForceAdder,
                'clamp_force_threshold', 'open_add_s', 'close_add_s', 'eject_add_s'),
            eject_stroke_multipliers=_rows(
                data.get('eject_stroke_time_multiplier'), EjectStrokeMultiplier, 'eject_stroke_mm', 'multiplier'),
            robot_time_by_clamp_force=_rows(
                data.get('robot_time_by_clamp_force'), RobotTime, 'min_clamp_force', 'robot_time_s'),
            sprue_length_by_weight=_rows(
                data.get('sprue_length_by_weight'), SprueBin, 'max_weight', 'sprue'),
            fill_pack=FillPackConstants.from_dict(data.get('fill_pack') or {}),
            defaults=TableDefaults.from_dict(defaults),
        )

    def with_tables(self, **changes) -> 'TablesBundle':
        """Copy with some tables swapped out (used for what-if runs)."""
        return replace(self, **changes)

    def find_mold_rule(self, mold_type: str) -> Optional[MoldTypeRule]:
        return find_rule(self.mold_type_rules, mold_type)
