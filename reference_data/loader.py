"""Load the lookup tables bundle from JSON files."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from config import EXAMPLES_FILE, TABLES_PATH
from .models import TablesBundle

logger = logging.getLogger(__name__)


class ReferenceDataError(RuntimeError):
    """A table file exists but cannot be used."""


# bundle key -> (file name, empty value when the file is absent)
TABLE_FILES = {
    'mold_type_rules': ('moldTypeRules.json', []),
    'cooling_grade_params': ('coolingGradeParams.json', []),
    'resin_aliases': ('resinAliases.json', {}),
    'cooling': ('cooling.json', {}),
    'clamp_control_table': ('clampControlTable.json', []),
    'open_close_speed_control': ('openCloseSpeedControl.json', []),
    'ejecting_speed_control': ('ejectingSpeedControl.json', []),
    'clamp_force_stage_adders': ('clampForceStageAdders.json', []),
    'eject_stroke_time_multiplier': ('ejectStrokeTimeMultiplier.json', []),
    'robot_time_by_clamp_force': ('robotTimeByClampForce.json', []),
    'sprue_length_by_weight': ('sprueLengthByWeight.json', []),
    'fill_pack': ('fillPack.json', {}),
    'defaults': ('defaults.json', {}),
}


def load_table_file(path: Path, empty: Any) -> Any:
    """Load one JSON table.

    A missing file is not fatal: the engine falls back to its documented
    defaults, so we log and hand back an empty table.
    """
    if not path.exists():
        logger.warning("Table file %s not found, using empty table", path)
        return empty

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ReferenceDataError(f"{path.name} is not valid JSON: {e}") from e

    if not isinstance(data, type(empty)):
        raise ReferenceDataError(
            f"{path.name} should hold a JSON {type(empty).__name__}, got {type(data).__name__}"
        )
    return data


def load_raw_tables(path: Optional[Path] = None) -> Dict[str, Any]:
    """Read every table file into a plain dict keyed like ``TablesBundle.from_dict`` expects."""
    base = Path(path) if path else TABLES_PATH
    return {key: load_table_file(base / name, empty) for key, (name, empty) in TABLE_FILES.items()}


def load_tables(path: Optional[Path] = None) -> TablesBundle:
    """Load the tables bundle.

    Args:
        path: Directory holding the table JSON files. Defaults to TABLES_PATH.

    Returns:
        Immutable TablesBundle
    """
    raw = load_raw_tables(path)
    bundle = TablesBundle.from_dict(raw)
    logger.debug(
        "Loaded tables: %d mold rules, %d cooling grades",
        len(bundle.mold_type_rules), len(bundle.cooling_grades)
    )
    return bundle


def load_examples(path: Optional[Path] = None) -> list:
    """Load recorded spreadsheet cases (input, options, expected outputs)."""
    return load_table_file(Path(path) if path else EXAMPLES_FILE, [])
