from .models import (
    InputData, Options, StageMap, Outputs, PlateType, CoolingOption, RobotOverrideReason,
    STAGES, PLATE_TYPES, ALLOWED_CAVITIES, COOLING_OPTIONS
)
from .lookups import approximate_lookup, lookup_by_key, excel_match, excel_vlookup, resin_keys
from .values import round_half_up, fraction_or_percent, first_present
from .fill_pack import compute_fill_time, compute_pack_time, compute_fill_pack_detailed, FillPackDebug
from .cooling import compute_cooling_time, compute_cooling_time_detailed, CoolingDebug
from .open_close_eject import (
    compute_open_time, compute_close_time, compute_eject_time,
    compute_open_close_eject_detailed, compute_total_stroke, OpenCloseEjectDebug
)
from .robot import compute_robot_time, compute_robot_time_detailed, resolve_robot_gate, RobotGate
from .mold_rules import apply_mold_type_adjustments, MoldTypeAdjustment
from .assembly import assemble_stages, resolve_safety_factor, AssemblyResult
from .debug import CycleTimeDebug
from .defaults import (
    compute_default_eject_stroke, maybe_apply_auto_eject_stroke, reset_eject_stroke_to_auto,
    apply_eject_stroke_setting, EjectStrokeSetting,
    select_sprue_length, derive_sprue_length, derive_pin_runner,
    should_lock_pin_runner, should_lock_sprue_length, apply_runner_lengths,
    normalize_input, normalize_options
)
from .cycle_time import (
    compute_cycle_time, compute_cycle_time_with_debug, CycleTimeReport,
    calculate_shots_per_hour, calculate_parts_per_hour
)

__all__ = [
    'InputData', 'Options', 'StageMap', 'Outputs', 'PlateType', 'CoolingOption', 'RobotOverrideReason',
    'STAGES', 'PLATE_TYPES', 'ALLOWED_CAVITIES', 'COOLING_OPTIONS',
    'approximate_lookup', 'lookup_by_key', 'excel_match', 'excel_vlookup', 'resin_keys',
    'round_half_up', 'fraction_or_percent', 'first_present',
    'compute_fill_time', 'compute_pack_time', 'compute_fill_pack_detailed', 'FillPackDebug',
    'compute_cooling_time', 'compute_cooling_time_detailed', 'CoolingDebug',
    'compute_open_time', 'compute_close_time', 'compute_eject_time',
    'compute_open_close_eject_detailed', 'compute_total_stroke', 'OpenCloseEjectDebug',
    'compute_robot_time', 'compute_robot_time_detailed', 'resolve_robot_gate', 'RobotGate',
    'apply_mold_type_adjustments', 'MoldTypeAdjustment',
    'assemble_stages', 'resolve_safety_factor', 'AssemblyResult',
    'CycleTimeDebug',
    'compute_default_eject_stroke', 'maybe_apply_auto_eject_stroke', 'reset_eject_stroke_to_auto',
    'apply_eject_stroke_setting', 'EjectStrokeSetting',
    'select_sprue_length', 'derive_sprue_length', 'derive_pin_runner',
    'should_lock_pin_runner', 'should_lock_sprue_length', 'apply_runner_lengths',
    'normalize_input', 'normalize_options',
    'compute_cycle_time', 'compute_cycle_time_with_debug', 'CycleTimeReport',
    'calculate_shots_per_hour', 'calculate_parts_per_hour'
]
