from .models import (
    TablesBundle, MoldTypeRule, CoolingGrade, ClampForceReference, ThicknessStep,
    ClampControl, SpeedMode, ClampForceAdder, EjectStrokeMultiplier, RobotTime, SprueBin,
    FillPackConstants, TableDefaults
)
from .loader import load_tables, load_raw_tables, load_examples, ReferenceDataError
from calculations.lookups import resin_keys
from .validation import validate_tables, TableCheckResult

__all__ = [
    'TablesBundle', 'MoldTypeRule', 'CoolingGrade', 'ClampForceReference', 'ThicknessStep',
    'ClampControl', 'SpeedMode', 'ClampForceAdder', 'EjectStrokeMultiplier', 'RobotTime', 'SprueBin',
    'FillPackConstants', 'TableDefaults',
    'load_tables', 'load_raw_tables', 'load_examples', 'ReferenceDataError',
    'resin_keys',
    'validate_tables', 'TableCheckResult'
]
