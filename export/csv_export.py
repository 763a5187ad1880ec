"""Plain CSV rendering of batch results."""

import csv
import io
from typing import Sequence

from calculations.models import STAGES
from batch.runner import RowResult

RESULT_CSV_HEADERS = ['Row', 'Status', 'Error'] + [stage.capitalize() for stage in STAGES] + ['Total']


def batch_results_to_csv(results: Sequence[RowResult]) -> str:
    """One line per row result; stage columns are blank for error rows."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(RESULT_CSV_HEADERS)
    for result in results:
        if result.outputs is not None:
            stages = [f"{getattr(result.outputs, stage):.2f}" for stage in STAGES]
            total = f"{result.outputs.total:.2f}"
        else:
            stages = [''] * len(STAGES)
            total = ''
        writer.writerow([result.row_number, result.status, result.error or ''] + stages + [total])
    return buffer.getvalue()
