"""Spreadsheet-style lookup primitives.

Every bin table in the workbook is read with VLOOKUP(..., TRUE) or
MATCH(..., 1). These helpers reproduce those semantics so the stage
calculators never have to re-implement "largest key <= value" on their own.
"""

from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple, TypeVar

from .values import is_number

T = TypeVar('T')


def approximate_lookup(
    rows: Optional[Iterable[T]],
    value: float,
    key: Callable[[T], float]
) -> Optional[T]:
    """Return the row with the greatest key <= value.

    Rows are sorted by key first, so callers may pass tables in any order.
    A value below every key yields the smallest-key row: a bin lookup never
    comes back empty unless the table itself is empty.

    Args:
        rows: Table rows
        value: Query value
        key: Extracts the numeric bin key from a row

    Returns:
        Selected row, or None only for an empty table
    """
    ordered = sorted(rows or [], key=key)
    if not ordered:
        return None

    current = ordered[0]
    for row in ordered:
        if value < key(row):
            return current
        current = row
    return current


def lookup_by_key(
    rows: Optional[Sequence[T]],
    wanted: Any,
    key: Callable[[T], Any]
) -> Tuple[Optional[T], bool]:
    """Exact-match lookup with the first row as documented default.

    Returns:
        Tuple of (row, matched). ``matched`` is False when the first row
        was returned as a fallback (or the table is empty).
    """
    rows = list(rows or [])
    for row in rows:
        if key(row) == wanted:
            return row, True
    return (rows[0] if rows else None), False


def _comparable_lte(a: Any, b: Any) -> Optional[bool]:
    """a <= b for same-kind values; None when the types cannot be ordered."""
    if is_number(a) and is_number(b):
        return a <= b
    if isinstance(a, str) and isinstance(b, str):
        return a <= b
    return None


def _flatten_column(array: Sequence[Any]) -> List[Any]:
    """Accept a flat list or a single-column 2D range."""
    return [item[0] if isinstance(item, (list, tuple)) and item else item for item in array]


def excel_match(value: Any, array: Sequence[Any], match_type: int = 1) -> Optional[int]:
    """Emulate MATCH(value, array, match_type).

    Returns:
        1-based position, or None for #N/A
    """
    items = _flatten_column(array)

    if match_type == 0:
        for idx, item in enumerate(items, 1):
            if _comparable_lte(item, value) is not None and item == value:
                return idx
        return None

    if match_type == -1:
        for idx, item in enumerate(items, 1):
            if _comparable_lte(value, item) is True:
                return idx
        return None

    candidate = None
    for idx, item in enumerate(items, 1):
        if _comparable_lte(item, value) is True:
            candidate = idx
    return candidate


def excel_vlookup(value: Any, table: Sequence[Sequence[Any]], column_index: int, approximate: bool) -> Any:
    """Emulate VLOOKUP(value, table, column_index, approximate).

    Approximate mode assumes the first column is sorted ascending and stops
    at the first key greater than ``value``.
    """
    if column_index < 1:
        return None

    if not approximate:
        for row in table:
            if row and row[0] == value and _comparable_lte(row[0], value) is not None:
                return _cell(row, column_index)
        return None

    candidate = None
    for row in table:
        if not row:
            continue
        verdict = _comparable_lte(row[0], value)
        if verdict is True:
            candidate = row
        elif verdict is False:
            break
    return _cell(candidate, column_index) if candidate is not None else None


def _cell(row: Sequence[Any], column_index: int) -> Any:
    return row[column_index - 1] if len(row) >= column_index else None


def resin_keys(resin: str, aliases: Mapping[str, str]) -> List[str]:
    """Return ``resin`` followed by every spelling that maps to the same row.

    Glass-filled variants ("PET GF30") share cooling constants with their
    base resin unless the table has an exact entry, so the original spelling
    always comes first.
    """
    keys = [resin]

    canonical = aliases.get(resin)
    if canonical and canonical not in keys:
        keys.append(canonical)

    for alias, target in aliases.items():
        if target == resin and alias not in keys:
            keys.append(alias)

    return keys
