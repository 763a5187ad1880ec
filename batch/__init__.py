from .errors import CsvFieldError, CsvStructureError
from .parsing import (
    BATCH_CSV_HEADERS, DEFAULT_BATCH_CSV_TEMPLATE,
    parse_csv, parse_enum_strict, parse_number_strict, parse_row
)
from .runner import BatchCsvRunner, RowResult, BatchSummary, summarize_results

__all__ = [
    'CsvFieldError', 'CsvStructureError',
    'BATCH_CSV_HEADERS', 'DEFAULT_BATCH_CSV_TEMPLATE',
    'parse_csv', 'parse_enum_strict', 'parse_number_strict', 'parse_row',
    'BatchCsvRunner', 'RowResult', 'BatchSummary', 'summarize_results'
]
