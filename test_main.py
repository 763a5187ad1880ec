"""Tests for the command line entry point."""

import json

from batch import DEFAULT_BATCH_CSV_TEMPLATE
from main import main
from reference_data import load_examples


def test_template(capsys):
    assert main(['template']) == 0
    assert capsys.readouterr().out.strip() == DEFAULT_BATCH_CSV_TEMPLATE


def test_compute_example(capsys):
    assert main(['compute', '--example', 'excel_case_01', '--debug']) == 0
    out = capsys.readouterr().out
    assert "total        21.30 s" in out
    assert "display sum 21.29" in out


def test_check_tables(capsys):
    assert main(['check-tables']) == 0
    assert "Tables OK" in capsys.readouterr().out


def test_batch_to_files(tmp_path, capsys):
    source = tmp_path / "parts.csv"
    source.write_text(DEFAULT_BATCH_CSV_TEMPLATE, encoding='utf-8')
    out_csv = tmp_path / "results.csv"

    assert main(['batch', str(source), '--csv', str(out_csv), '--xlsx', str(tmp_path / "results.xlsx")]) == 0
    assert out_csv.read_text(encoding='utf-8').splitlines()[1].startswith("2,ok,")
    assert (tmp_path / "results.xlsx").exists()
    assert "2 of 2 rows OK" in capsys.readouterr().err


def test_batch_missing_column(tmp_path, capsys):
    source = tmp_path / "parts.csv"
    source.write_text("Mold type,Resin\nx,y\n", encoding='utf-8')

    assert main(['batch', str(source)]) == 2
    assert "Missing column: Grade" in capsys.readouterr().err


def test_compute_case_file_ignores_unknown_keys(tmp_path, capsys):
    case = next(c for c in load_examples() if c['name'] == 'excel_case_01')
    case = {**case, 'input': {**case['input'], 'colour': 'black'}}
    source = tmp_path / "case.json"
    source.write_text(json.dumps(case), encoding='utf-8')

    assert main(['compute', str(source)]) == 0
    assert "total        21.30 s" in capsys.readouterr().out
