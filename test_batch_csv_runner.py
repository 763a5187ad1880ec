"""Tests for batch CSV parsing and the batch runner."""

import csv

import pytest

from batch import (
    BatchCsvRunner, CsvFieldError, CsvStructureError, DEFAULT_BATCH_CSV_TEMPLATE,
    parse_csv, parse_enum_strict, parse_number_strict, summarize_results
)
from calculations.models import Options

HEADER = "Mold type,Resin,Grade,Cavity,Weight,Clamp force,Thickness,Height,Plate type,Robot"
OK_ROW = "General INJ.,PP,HJ500,8,0.52,90,2,3,2P,ON"
HUGE_NUMBER = "1" + "0" * 400


@pytest.fixture
def runner(tables, base_options):
    return BatchCsvRunner(tables, base_options)


def test_bad_row_does_not_stop_batch(runner):
    text = "\n".join([HEADER, OK_ROW, "General INJ.,PP,HJ500,8,0.52,90,2,3,2P,MAYBE", OK_ROW])
    results = runner.run(text)

    assert [r.status for r in results] == ['ok', 'error', 'ok']
    assert [r.row_number for r in results] == [2, 3, 4]
    assert results[1].error == 'Robot must be ON or OFF (got "MAYBE")'
    assert results[1].outputs is None


def test_recorded_row_matches_example(runner):
    result = runner.run("\n".join([HEADER, OK_ROW]))[0]

    assert result.ok
    assert result.outputs.total == pytest.approx(21.30, abs=0.01)
    assert result.options.sprue_length_mm == 70
    assert result.options.pin_runner_3p_mm == 0
    assert result.input.robot_enabled is True


def test_three_plate_row_derives_pin_runner(runner):
    result = runner.run("\n".join([HEADER, "General INJ.,PP,HJ500,4,150,120,2.5,5,3p,off"]))[0]

    assert result.input.plate_type == '3P'
    assert result.options.sprue_length_mm == 75
    assert result.options.pin_runner_3p_mm == 105
    assert result.outputs.robot == 0


def test_eject_stroke_follows_height(runner, tables, base_options):
    tall = "General INJ.,PP,HJ500,1,20,200,2,60,2P,ON"
    assert runner.run("\n".join([HEADER, tall]))[0].options.eject_stroke_mm == pytest.approx(90)

    manual = BatchCsvRunner(tables, Options(eject_stroke_mm=30, eject_stroke_is_manual=True))
    assert manual.run("\n".join([HEADER, tall]))[0].options.eject_stroke_mm == 30


def test_headers_match_loosely_and_in_any_order(runner):
    text = "robot, PLATE TYPE ,height,thickness,clampforce,weight,cavity,grade,resin,moldtype\n" \
           "ON,2P,3,2,90,0.52,8,HJ500,PP,General INJ."
    assert runner.run(text)[0].ok


def test_missing_column_is_fatal(runner):
    with pytest.raises(CsvStructureError, match="Missing column: Robot"):
        runner.run("Mold type,Resin,Grade,Cavity,Weight,Clamp force,Thickness,Height,Plate type\nx")


def test_empty_payload(runner):
    assert runner.run("") == []
    assert runner.run(HEADER) == []


@pytest.mark.parametrize("row,message", [
    ("General INJ.,PP,HJ500,3,0.52,90,2,3,2P,ON", 'Cavity must be one of 1, 2, 4, 6, 8 (got "3")'),
    ("General INJ.,PP,HJ500,8,0.52g,90,2,3,2P,ON", 'Weight must be a number (got "0.52g")'),
    ("General INJ.,PP,HJ500,8,0.52,0,2,3,2P,ON", 'Clamp force must be a number (got "0")'),
    ("General INJ.,PP,HJ500,8,0.52,90,2,3,4P,ON", 'Plate type must be 2P, 3P, or HOT (got "4P")'),
    (",PP,HJ500,8,0.52,90,2,3,2P,ON", 'Mold type is required'),
    ("General INJ.,PP,HJ500,2.5,0.52,90,2,3,2P,ON", 'Cavity must be a number (got "2.5")'),
    (f"General INJ.,PP,HJ500,8,{HUGE_NUMBER},90,2,3,2P,ON", f'Weight must be a number (got "{HUGE_NUMBER}")'),
])
def test_field_errors(runner, row, message):
    result = runner.run("\n".join([HEADER, row]))[0]
    assert result.status == 'error'
    assert result.error == message


def test_quoted_fields_and_thousands_separator(runner):
    text = HEADER + '\n"General INJ.",PP,HJ500,1,"1,200",850,"3.5",40,2P,ON\n'
    result = runner.run(text)[0]

    assert result.ok
    assert result.input.weight_g_1cav == 1200


def test_parse_csv_strips_bom_and_blank_rows():
    rows = parse_csv('\ufeffa,b\n\n , \n"x\ny",z\r\n')
    assert rows == [['a', 'b'], ['x\ny', 'z']]


def test_parse_number_strict():
    assert parse_number_strict('Weight', ' 1,234.5 ') == 1234.5
    assert parse_number_strict('Cavity', '4', integer=True, minimum=1) == 4
    for bad in ('', '1e3', '12mm', '.5', 'abc'):
        with pytest.raises(CsvFieldError):
            parse_number_strict('Weight', bad)
    with pytest.raises(CsvFieldError) as exc:
        parse_number_strict('Height', '-2', gt_zero=True)
    assert exc.value.field == 'Height'


def test_parse_enum_strict():
    assert parse_enum_strict('Robot', ' on ', ('ON', 'OFF')) == 'ON'
    with pytest.raises(CsvFieldError, match=r'Plate type must be 2P or 3P \(got "x"\)'):
        parse_enum_strict('Plate type', 'x', ('2P', '3P'))


def test_template_runs_clean(runner):
    results = runner.run(DEFAULT_BATCH_CSV_TEMPLATE)
    summary = summarize_results(results)

    assert summary.ok_rows == 2
    assert summary.error_rows == 0
    assert str(summary) == "2 of 2 rows OK"


def test_summary_lists_error_rows(runner):
    results = runner.run("\n".join([HEADER, OK_ROW, "bad"]))
    summary = summarize_results(results)

    assert summary.error_row_numbers == [3]
    assert "errors in rows 3" in str(summary)


def test_oversized_cell_does_not_stop_batch(runner):
    """A 200k-character cell is read like any other."""
    limit_before = csv.field_size_limit()
    long_grade = "x" * 200000
    text = "\n".join([HEADER, OK_ROW, f'General INJ.,PP,"{long_grade}",8,0.52,90,2,3,2P,ON', OK_ROW])
    results = runner.run(text)

    assert [r.status for r in results] == ['ok', 'ok', 'ok']
    assert results[1].input.grade == long_grade
    assert csv.field_size_limit() == limit_before


def test_calculation_failure_becomes_error_row(runner, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("table row missing")

    monkeypatch.setattr('batch.runner.compute_cycle_time', broken)
    results = runner.run("\n".join([HEADER, OK_ROW, OK_ROW]))

    assert [r.status for r in results] == ['error', 'error']
    assert results[0].error == "table row missing"
    assert results[0].input.grade == 'HJ500'
    assert results[0].outputs is None
