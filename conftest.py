"""Shared fixtures: the bundled lookup tables and recorded example cases."""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from config import DEFAULT_OPTIONS
from calculations import InputData, Options
from reference_data import load_examples, load_tables


@pytest.fixture(scope="session")
def tables():
    return load_tables()


@pytest.fixture(scope="session")
def examples():
    return {case['name']: case for case in load_examples()}


@pytest.fixture
def example_case(examples):
    return examples['excel_case_01']


@pytest.fixture
def base_input():
    """excel_case_01 part: 8 x 0.52 g PP on a 90 t machine."""
    return InputData(
        mold_type='General INJ.',
        resin='PP',
        grade='HJ500',
        cavity=8,
        weight_g_1cav=0.52,
        clamp_force_ton=90,
        thickness_mm=2,
        height_mm_eject=3,
        plate_type='2P',
        robot_enabled=True,
    )


@pytest.fixture
def base_options():
    return Options.from_dict({**DEFAULT_OPTIONS, 'safety_factor': 0.1})
