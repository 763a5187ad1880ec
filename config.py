"""Configuration settings for the Cycle Time Calculator."""

import logging
import os
from pathlib import Path

# Default to local directory, can be pointed at a shared table set
# Example: CT_DATA_PATH=//server/share/ct_tables
DATA_PATH = Path(os.environ.get('CT_DATA_PATH', Path(__file__).parent / 'data'))

# Lookup tables (mold-type rules, cooling grades, bins)
TABLES_PATH = DATA_PATH / 'tables'

# Recorded spreadsheet cases used for parity checks
EXAMPLES_FILE = DATA_PATH / 'examples.json'

LOG_LEVEL = os.environ.get('CT_LOG_LEVEL', 'WARNING')


def configure_logging(level: str = LOG_LEVEL):
    """Configure root logging once for CLI use."""
    numeric = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(level=numeric, format="%(levelname)s %(name)s: %(message)s")


# Application settings
APP_NAME = "Cycle Time Calculator"
APP_VERSION = "1.0.0"

# Calculation defaults (used when the tables bundle does not carry a value)
DEFAULT_ROUNDING_DIGITS = 2
DEFAULT_SAFETY_FACTOR = 0.10  # 10% margin on every stage except robot
DEFAULT_MIN_COOLING_TIME_S = 11.5
MIN_FILL_TIME_S = 0.92
DEFAULT_OPEN_CLOSE_MAX_SPEED = 450  # mm/s
DEFAULT_EJECTOR_MAX_SPEED = 600  # mm/s

# Baseline machine options for a fresh calculation or a batch run
DEFAULT_OPTIONS = {
    'clamp_control': 'Logic valve',
    'mold_protection_mm': 120.0,
    'eject_stroke_mm': 45.0,
    'eject_stroke_is_manual': False,
    'cushion_distance_mm': 8.0,
    'robot_stroke_mm': 100.0,
    'vp_position_mm': 10.0,
    'sprue_length_mm': 70.0,
    'pin_runner_3p_mm': 0.0,
    'injection_speed_mm_s': 20.0,
    'open_close_stroke_mm': 0.0,
    'open_close_speed_mode': 'Base speed',
    'ejecting_speed_mode': 'Base speed',
    'cooling_option': 'BASE',
}
