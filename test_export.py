"""Tests for CSV and Excel result export."""

from openpyxl import load_workbook

from batch import BatchCsvRunner
from calculations import compute_cycle_time_with_debug
from export import RESULT_CSV_HEADERS, batch_results_to_csv, export_batch_results_to_excel, export_debug_to_excel

HEADER = "Mold type,Resin,Grade,Cavity,Weight,Clamp force,Thickness,Height,Plate type,Robot"
CSV_TEXT = "\n".join([HEADER, "General INJ.,PP,HJ500,8,0.52,90,2,3,2P,ON", "General INJ.,PP,HJ500,8,x,90,2,3,2P,ON"])


def test_results_csv(tables, base_options):
    results = BatchCsvRunner(tables, base_options).run(CSV_TEXT)
    lines = batch_results_to_csv(results).splitlines()

    assert lines[0] == "Row,Status,Error,Fill,Pack,Cool,Open,Eject,Robot,Close,Total"
    assert lines[0].split(',') == RESULT_CSV_HEADERS
    assert lines[1] == "2,ok,,1.01,2.04,12.65,1.41,0.32,2.00,1.86,21.30"
    assert lines[2] == '3,error,"Weight must be a number (got ""x"")",,,,,,,,'


def test_batch_workbook(tables, base_options, tmp_path):
    results = BatchCsvRunner(tables, base_options).run(CSV_TEXT)
    path = export_batch_results_to_excel(results, tmp_path / "out" / "batch.xlsx")

    wb = load_workbook(path)
    assert wb.sheetnames == ["Results", "Summary"]
    ws = wb["Results"]
    assert ws.cell(row=1, column=1).value == "Row"
    assert ws.cell(row=2, column=2).value == "ok"
    assert ws.cell(row=3, column=ws.max_column).value.startswith("Weight must be")
    assert wb["Summary"]["B5"].value == 1


def test_debug_workbook(base_input, base_options, tables, tmp_path):
    report = compute_cycle_time_with_debug(base_input, base_options, tables)
    path = export_debug_to_excel(report.debug, tmp_path / "trace.xlsx")

    wb = load_workbook(path)
    stages = wb["Stages"]
    assert stages.cell(row=2, column=1).value == "fill"
    assert stages.cell(row=9, column=1).value == "Total"
    assert stages.cell(row=9, column=6).value == 21.3
    labels = [row[0].value for row in wb["Trace"].iter_rows()]
    assert "Cooling" in labels
    assert "final_cooling" in labels
