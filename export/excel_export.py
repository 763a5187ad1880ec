"""Excel export of batch results and cycle time traces using openpyxl."""

from pathlib import Path
from typing import Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter

from calculations.debug import CycleTimeDebug
from calculations.models import STAGES
from batch.runner import RowResult, summarize_results


# Styles
HEADER_FONT = Font(bold=True, color='FFFFFF')
HEADER_FILL = PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid')
HEADER_ALIGNMENT = Alignment(horizontal='center', vertical='center', wrap_text=True)

THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)

WARNING_FILL = PatternFill(start_color='FFEB9C', end_color='FFEB9C', fill_type='solid')
ERROR_FILL = PatternFill(start_color='FFC7CE', end_color='FFC7CE', fill_type='solid')

NUMBER_FORMAT = '0.00'

INPUT_COLUMNS = [
    ('Mold type', 'mold_type'), ('Resin', 'resin'), ('Grade', 'grade'), ('Cavity', 'cavity'),
    ('Weight (g)', 'weight_g_1cav'), ('Clamp (t)', 'clamp_force_ton'), ('Thickness (mm)', 'thickness_mm'),
    ('Height (mm)', 'height_mm_eject'), ('Plate', 'plate_type'),
]


def set_column_widths(ws, widths: dict):
    """Set column widths for a worksheet."""
    for col, width in widths.items():
        ws.column_dimensions[get_column_letter(col)].width = width


def style_header_row(ws, row: int, num_cols: int):
    """Apply header styling to a row."""
    for col in range(1, num_cols + 1):
        cell = ws.cell(row=row, column=col)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT
        cell.border = THIN_BORDER


def _save(wb: Workbook, output_path) -> str:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(output_path)
    return str(output_path)


def export_batch_results_to_excel(results: Sequence[RowResult], output_path) -> str:
    """Export batch CSV results to an Excel file.

    Args:
        results: RowResult list from BatchCsvRunner.run
        output_path: Path to save Excel file

    Returns:
        Path to created Excel file
    """
    wb = Workbook()

    ws = wb.active
    ws.title = "Results"
    _write_results_sheet(ws, results)

    ws_summary = wb.create_sheet("Summary")
    _write_summary_sheet(ws_summary, results)

    return _save(wb, output_path)


def _write_results_sheet(ws, results: Sequence[RowResult]):
    """One row per CSV row; error rows are highlighted."""
    headers = ['Row', 'Status'] + [label for label, _ in INPUT_COLUMNS] + ['Robot']
    headers += [stage.capitalize() for stage in STAGES] + ['Total', 'Error']
    for col, header in enumerate(headers, 1):
        ws.cell(row=1, column=col, value=header)
    style_header_row(ws, 1, len(headers))

    for row_idx, result in enumerate(results, 2):
        values = [result.row_number, result.status]
        if result.input is not None:
            values += [getattr(result.input, attr) for _, attr in INPUT_COLUMNS]
            values.append('ON' if result.input.robot_enabled else 'OFF')
        else:
            values += [None] * (len(INPUT_COLUMNS) + 1)

        if result.outputs is not None:
            values += [getattr(result.outputs, stage) for stage in STAGES] + [result.outputs.total]
        else:
            values += [None] * (len(STAGES) + 1)
        values.append(result.error)

        first_stage_col = len(headers) - len(STAGES) - 1
        for col, value in enumerate(values, 1):
            cell = ws.cell(row=row_idx, column=col, value=value)
            cell.border = THIN_BORDER
            if first_stage_col <= col < len(headers) and value is not None:
                cell.number_format = NUMBER_FORMAT
            if not result.ok:
                cell.fill = ERROR_FILL

    widths = {col: 12 for col in range(1, len(headers) + 1)}
    widths[len(headers)] = 45
    set_column_widths(ws, widths)
    ws.freeze_panes = 'A2'


def _write_summary_sheet(ws, results: Sequence[RowResult]):
    """Write batch counts."""
    summary = summarize_results(results)

    ws['A1'] = "Batch Summary"
    ws['A1'].font = Font(bold=True, size=14)

    ws['A3'] = "Rows:"
    ws['B3'] = summary.total_rows
    ws['A4'] = "OK:"
    ws['B4'] = summary.ok_rows
    ws['A5'] = "Errors:"
    ws['B5'] = summary.error_rows
    if summary.error_rows:
        ws['B5'].fill = ERROR_FILL
        ws['A6'] = "Error rows:"
        ws['B6'] = ', '.join(str(n) for n in summary.error_row_numbers)

    set_column_widths(ws, {1: 15, 2: 30})


def export_debug_to_excel(debug: CycleTimeDebug, output_path) -> str:
    """Export one computation trace to an Excel file.

    The "Stages" sheet lists every phase per stage; the "Trace" sheet holds
    the calculator sub-traces and fallback notes.

    Args:
        debug: CycleTimeDebug from compute_cycle_time_with_debug
        output_path: Path to save Excel file

    Returns:
        Path to created Excel file
    """
    wb = Workbook()

    ws = wb.active
    ws.title = "Stages"
    _write_stages_sheet(ws, debug)

    ws_trace = wb.create_sheet("Trace")
    _write_trace_sheet(ws_trace, debug)

    return _save(wb, output_path)


def _write_stages_sheet(ws, debug: CycleTimeDebug):
    headers = ['Stage', 'Base', 'After mold rule', 'After robot gate', 'After safety', 'Display']
    for col, header in enumerate(headers, 1):
        ws.cell(row=1, column=col, value=header)
    style_header_row(ws, 1, len(headers))

    for row_idx, values in enumerate(debug.stage_rows(), 2):
        stage = values[0]
        for col, value in enumerate(values, 1):
            cell = ws.cell(row=row_idx, column=col, value=value)
            cell.border = THIN_BORDER
            if col > 1:
                cell.number_format = '0.000' if col < len(headers) else NUMBER_FORMAT
        if debug.mold_adjustment and stage in debug.mold_adjustment.affected_stages:
            ws.cell(row=row_idx, column=3).fill = WARNING_FILL
        if stage == 'robot' and not debug.robot_gate.enabled:
            ws.cell(row=row_idx, column=4).fill = WARNING_FILL

    total_row = len(STAGES) + 2
    ws.cell(row=total_row, column=1, value='Total').font = Font(bold=True)
    ws.cell(row=total_row, column=5, value=debug.raw_total).number_format = '0.000'
    ws.cell(row=total_row, column=6, value=debug.total).number_format = NUMBER_FORMAT
    ws.cell(row=total_row + 1, column=1, value='Sum of display values')
    ws.cell(row=total_row + 1, column=6, value=debug.display_stage_sum).number_format = NUMBER_FORMAT

    ws.cell(row=total_row + 3, column=1, value='Safety factor')
    ws.cell(row=total_row + 3, column=2, value=debug.safety_factor)
    ws.cell(row=total_row + 4, column=1, value='Rounding digits')
    ws.cell(row=total_row + 4, column=2, value=debug.rounding)

    set_column_widths(ws, {1: 22, 2: 12, 3: 16, 4: 16, 5: 14, 6: 12})


def _write_trace_sheet(ws, debug: CycleTimeDebug):
    """Key / value listing of each calculator trace."""
    sections = [
        ('Fill / pack', debug.fill_pack),
        ('Cooling', debug.cooling),
        ('Open / close / eject', debug.open_close_eject),
        ('Robot gate', debug.robot_gate),
    ]

    row = 1
    for title, trace in sections:
        ws.cell(row=row, column=1, value=title)
        ws.cell(row=row, column=2, value='Value')
        style_header_row(ws, row, 2)
        row += 1
        for name, value in vars(trace).items():
            if isinstance(value, tuple):
                value = ', '.join(f"{v:g}" if isinstance(v, float) else str(v) for v in value)
            ws.cell(row=row, column=1, value=name).border = THIN_BORDER
            ws.cell(row=row, column=2, value=value).border = THIN_BORDER
            row += 1
        row += 1

    ws.cell(row=row, column=1, value='Fallbacks')
    style_header_row(ws, row, 1)
    row += 1
    if not debug.fallbacks:
        ws.cell(row=row, column=1, value='None')
    for note in debug.fallbacks:
        ws.cell(row=row, column=1, value=note).fill = WARNING_FILL
        row += 1

    set_column_widths(ws, {1: 40, 2: 24})
