"""Run the cycle time engine over every row of a batch CSV."""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from calculations.cycle_time import compute_cycle_time
from calculations.defaults import apply_eject_stroke_setting, derive_pin_runner, derive_sprue_length
from calculations.models import InputData, Options, Outputs
from .errors import CsvFieldError
from .parsing import cells_to_record, map_headers, parse_csv, parse_row

logger = logging.getLogger(__name__)

STATUS_OK = 'ok'
STATUS_ERROR = 'error'


@dataclass(frozen=True)
class RowResult:
    """Outcome of one CSV data row. Row numbers count the header as row 1."""
    row_number: int
    status: str
    input: Optional[InputData] = None
    options: Optional[Options] = None
    outputs: Optional[Outputs] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK


@dataclass
class BatchSummary:
    """Counts for a finished batch."""
    total_rows: int
    ok_rows: int
    error_rows: int
    error_row_numbers: List[int]

    def __str__(self) -> str:
        if self.error_rows == 0:
            return f"{self.ok_rows} of {self.total_rows} rows OK"
        rows = ', '.join(str(n) for n in self.error_row_numbers)
        return f"{self.ok_rows} of {self.total_rows} rows OK, errors in rows {rows}"


def summarize_results(results: Sequence[RowResult]) -> BatchSummary:
    errors = [r.row_number for r in results if not r.ok]
    return BatchSummary(
        total_rows=len(results),
        ok_rows=len(results) - len(errors),
        error_rows=len(errors),
        error_row_numbers=errors,
    )


class BatchCsvRunner:
    """Evaluate a CSV of parts against one set of baseline options.

    Each row is parsed and computed on its own; a bad row becomes an error
    result and the rest of the batch carries on. Only a missing header
    column or unreadable CSV text stops the run.
    """

    def __init__(self, tables, base_options: Options, sprue_bins: Optional[Sequence] = None):
        self.tables = tables
        self.base_options = base_options
        self.sprue_bins = tables.sprue_length_by_weight if sprue_bins is None else sprue_bins

    def options_for_row(self, input_data: InputData) -> Options:
        """Baseline options with the row's robot toggle, runner lengths and eject stroke."""
        sprue = derive_sprue_length(
            input_data.plate_type, input_data.weight_g_1cav, self.sprue_bins,
            current=self.base_options.sprue_length_mm,
        )
        options = replace(
            self.base_options,
            robot_enabled=input_data.robot_enabled,
            sprue_length_mm=sprue,
            pin_runner_3p_mm=derive_pin_runner(input_data.plate_type, sprue),
        )
        return apply_eject_stroke_setting(options, input_data.height_mm_eject, self.tables)

    def run_row(self, row_number: int, record: dict) -> RowResult:
        try:
            input_data = parse_row(record)
        except CsvFieldError as e:
            logger.info("Row %d rejected: %s", row_number, e.message)
            return RowResult(row_number=row_number, status=STATUS_ERROR, error=e.message)

        try:
            options = self.options_for_row(input_data)
            outputs = compute_cycle_time(input_data, options, self.tables)
        except Exception as e:
            logger.exception("Row %d failed during calculation", row_number)
            return RowResult(row_number=row_number, status=STATUS_ERROR, input=input_data, error=str(e))
        return RowResult(
            row_number=row_number,
            status=STATUS_OK,
            input=input_data,
            options=options,
            outputs=outputs,
        )

    def run(self, csv_text: str) -> List[RowResult]:
        """Compute every data row of ``csv_text``.

        Args:
            csv_text: CSV with a header row (see BATCH_CSV_HEADERS)

        Returns:
            One RowResult per non-blank data row, in input order

        Raises:
            CsvStructureError: If a required column is missing or the text
                is not readable as CSV
        """
        rows = parse_csv(csv_text)
        if not rows:
            return []

        header_map = map_headers(rows[0])
        results = []
        for idx, cells in enumerate(rows[1:]):
            results.append(self.run_row(idx + 2, cells_to_record(cells, header_map)))

        logger.info("Batch finished: %s", summarize_results(results))
        return results
