"""Strict CSV parsing for batch cycle time runs."""

import csv
import io
import math
import re
from typing import Dict, List, Optional, Sequence

from calculations.models import ALLOWED_CAVITIES, PLATE_TYPES, InputData
from .errors import CsvFieldError, CsvStructureError

# (field key, header label) in template column order
CSV_FIELDS = (
    ('mold_type', 'Mold type'),
    ('resin', 'Resin'),
    ('grade', 'Grade'),
    ('cavity', 'Cavity'),
    ('weight', 'Weight'),
    ('clamp_force', 'Clamp force'),
    ('thickness', 'Thickness'),
    ('height', 'Height'),
    ('plate_type', 'Plate type'),
    ('robot', 'Robot'),
)

BATCH_CSV_HEADERS = [label for _key, label in CSV_FIELDS]

DEFAULT_BATCH_CSV_TEMPLATE = "\n".join([
    ",".join(BATCH_CSV_HEADERS),
    "General INJ.,PP,HJ500,8,0.52,90,2,3,2P,ON",
    "General INJ.,PP,HJ500,4,0.6,120,2.5,5,3P,OFF",
])

ROBOT_VALUES = ('ON', 'OFF')

# Largest field csv accepts on every platform (C long may be 32-bit)
MAX_FIELD_SIZE = 2 ** 31 - 1

NUMBER_PATTERN = re.compile(r'^[+-]?\d+(?:\.\d+)?$')


def normalize_header(header: str) -> str:
    return re.sub(r'\s+', '', header).lower()


def format_allowed(allowed: Sequence[str]) -> str:
    """'A', 'A or B', 'A, B, or C'."""
    allowed = list(allowed)
    if not allowed:
        return ''
    if len(allowed) == 1:
        return allowed[0]
    if len(allowed) == 2:
        return f"{allowed[0]} or {allowed[1]}"
    return f"{', '.join(allowed[:-1])}, or {allowed[-1]}"


def parse_enum_strict(field: str, raw: Optional[str], allowed: Sequence[str]) -> str:
    """Case-insensitive match against a closed set; returns the canonical spelling."""
    trimmed = (raw or '').strip()
    for candidate in allowed:
        if candidate.upper() == trimmed.upper():
            return candidate
    raise CsvFieldError(field, f'{field} must be {format_allowed(allowed)} (got "{trimmed}")')


def parse_number_strict(
    field: str,
    raw: Optional[str],
    integer: bool = False,
    minimum: Optional[float] = None,
    gt_zero: bool = False
) -> float:
    """Parse a plain decimal number.

    Thousands separators are dropped; anything else (units, exponents,
    blanks) is rejected with a message naming the field.

    Args:
        field: Column label used in the error message
        raw: Cell text
        integer: Require a whole number
        minimum: Lowest allowed value
        gt_zero: Require a value above zero

    Returns:
        Parsed value

    Raises:
        CsvFieldError: If the cell is not an acceptable number
    """
    trimmed = (raw or '').strip()
    normalized = trimmed.replace(',', '')
    error = CsvFieldError(field, f'{field} must be a number (got "{trimmed}")')

    if not normalized or not NUMBER_PATTERN.match(normalized):
        raise error
    value = float(normalized)
    if not math.isfinite(value):
        raise error
    if integer and not value.is_integer():
        raise error
    if gt_zero and not value > 0:
        raise error
    if minimum is not None and value < minimum:
        raise error
    return value


def parse_required_text(field: str, raw: Optional[str]) -> str:
    trimmed = (raw or '').strip()
    if not trimmed:
        raise CsvFieldError(field, f"{field} is required")
    return trimmed


def parse_csv(text: str) -> List[List[str]]:
    """Split CSV text into rows, dropping a BOM and rows with only blank cells.

    Cells of any length are accepted.

    Raises:
        CsvStructureError: If the text is not readable as CSV
    """
    cleaned = text[1:] if text.startswith('\ufeff') else text
    previous_limit = csv.field_size_limit(MAX_FIELD_SIZE)
    try:
        reader = csv.reader(io.StringIO(cleaned, newline=''))
        return [row for row in reader if any(cell.strip() for cell in row)]
    except csv.Error as e:
        raise CsvStructureError(f"Unreadable CSV: {e}") from e
    finally:
        csv.field_size_limit(previous_limit)


def map_headers(header_row: Sequence[str]) -> Dict[str, int]:
    """Column index per field key.

    Raises:
        CsvStructureError: If any required column is missing
    """
    wanted = {normalize_header(label): key for key, label in CSV_FIELDS}
    mapping = {}
    for idx, header in enumerate(header_row):
        key = wanted.get(normalize_header(header.strip()))
        if key is not None:
            mapping[key] = idx

    for key, label in CSV_FIELDS:
        if key not in mapping:
            raise CsvStructureError(f"Missing column: {label}")
    return mapping


def cells_to_record(cells: Sequence[str], header_map: Dict[str, int]) -> Dict[str, str]:
    return {key: cells[idx] if idx < len(cells) else '' for key, idx in header_map.items()}


def parse_row(record: Dict[str, str]) -> InputData:
    """Turn one CSV record into InputData, raising CsvFieldError on the first bad field."""
    mold_type = parse_required_text('Mold type', record['mold_type'])
    resin = parse_required_text('Resin', record['resin'])
    grade = parse_required_text('Grade', record['grade'])

    cavity = parse_number_strict('Cavity', record['cavity'], integer=True, minimum=1)
    if int(cavity) not in ALLOWED_CAVITIES:
        allowed = ', '.join(str(c) for c in ALLOWED_CAVITIES)
        raise CsvFieldError('Cavity', f'Cavity must be one of {allowed} (got "{record["cavity"].strip()}")')

    weight = parse_number_strict('Weight', record['weight'], gt_zero=True)
    clamp_force = parse_number_strict('Clamp force', record['clamp_force'], gt_zero=True)
    thickness = parse_number_strict('Thickness', record['thickness'], gt_zero=True)
    height = parse_number_strict('Height', record['height'], gt_zero=True)
    plate_type = parse_enum_strict('Plate type', record['plate_type'], PLATE_TYPES)
    robot = parse_enum_strict('Robot', record['robot'], ROBOT_VALUES)

    return InputData(
        mold_type=mold_type,
        resin=resin,
        grade=grade,
        cavity=int(cavity),
        weight_g_1cav=weight,
        clamp_force_ton=clamp_force,
        thickness_mm=thickness,
        height_mm_eject=height,
        plate_type=plate_type,
        robot_enabled=robot == 'ON',
    )
