#!/usr/bin/env python3
"""Cycle Time Calculator - command line entry point.

Usage:
    python main.py compute case.json [--debug] [--json] [--xlsx trace.xlsx]
    python main.py compute --example excel_case_01
    python main.py batch parts.csv [--csv results.csv] [--xlsx results.xlsx]
    python main.py template
    python main.py check-tables
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from config import APP_NAME, APP_VERSION, DEFAULT_OPTIONS, LOG_LEVEL, configure_logging
from calculations import (
    InputData, Options, STAGES, compute_cycle_time_with_debug,
    calculate_shots_per_hour, calculate_parts_per_hour
)
from reference_data import load_tables, load_examples, validate_tables, ReferenceDataError
from batch import BatchCsvRunner, CsvStructureError, DEFAULT_BATCH_CSV_TEMPLATE, summarize_results
from export import batch_results_to_csv, export_batch_results_to_excel, export_debug_to_excel

logger = logging.getLogger(__name__)


def _tables(args: argparse.Namespace):
    return load_tables(Path(args.tables) if args.tables else None)


def _load_case(args: argparse.Namespace) -> dict:
    if args.example:
        for case in load_examples():
            if case.get('name') == args.example:
                return case
        raise SystemExit(f"No recorded example named '{args.example}'")
    if not args.case:
        raise SystemExit("compute needs a case JSON file or --example NAME")
    with open(args.case, 'r', encoding='utf-8') as f:
        return json.load(f)


def _cmd_compute(args: argparse.Namespace) -> int:
    tables = _tables(args)
    case = _load_case(args)
    input_data = InputData.from_dict(case.get('input', {}))
    options = Options.from_dict({**DEFAULT_OPTIONS, **case.get('options', {})})

    report = compute_cycle_time_with_debug(input_data, options, tables)
    outputs = report.outputs
    for stage in STAGES:
        print(f"{stage:<8}{getattr(outputs, stage):>10.2f} s")
    print(f"{'total':<8}{outputs.total:>10.2f} s")
    print(f"shots/h {calculate_shots_per_hour(outputs.total):>10.1f}")
    print(f"parts/h {calculate_parts_per_hour(outputs.total, input_data.cavity):>10.1f}")

    if args.debug:
        debug = report.debug
        print()
        print(f"{'stage':<8}{'base':>9}{'mold':>9}{'robot':>9}{'safety':>9}{'display':>9}")
        for row in debug.stage_rows():
            print(f"{row[0]:<8}" + ''.join(f"{v:>9.3f}" for v in row[1:]))
        print(f"raw total {debug.raw_total:.4f}, display sum {debug.display_stage_sum:.2f}")
        if debug.robot_gate.override_reason:
            print(f"robot off ({debug.robot_gate.override_reason})")
        for note in debug.fallbacks:
            print(f"fallback: {note}")

    if args.json:
        print(json.dumps(report.debug.to_dict(), indent=2))

    if args.xlsx:
        print(export_debug_to_excel(report.debug, args.xlsx))
    return 0


def _cmd_batch(args: argparse.Namespace) -> int:
    tables = _tables(args)
    runner = BatchCsvRunner(tables, Options.from_dict(DEFAULT_OPTIONS))
    text = Path(args.csv_file).read_text(encoding='utf-8-sig')

    try:
        results = runner.run(text)
    except CsvStructureError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    rendered = batch_results_to_csv(results)
    if args.csv:
        Path(args.csv).write_text(rendered, encoding='utf-8')
    else:
        print(rendered, end='')
    if args.xlsx:
        export_batch_results_to_excel(results, args.xlsx)

    print(summarize_results(results), file=sys.stderr)
    return 0


def _cmd_template(args: argparse.Namespace) -> int:
    print(DEFAULT_BATCH_CSV_TEMPLATE)
    return 0


def _cmd_check_tables(args: argparse.Namespace) -> int:
    result = validate_tables(_tables(args))
    print(result)
    for warning in result.warnings:
        logger.warning(warning)
    return 0 if result.ok else 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="cycle-time", description=f"{APP_NAME} {APP_VERSION}")
    p.add_argument("--tables", help="Directory with the lookup table JSON files")
    p.add_argument("--log-level", default=LOG_LEVEL, help="Logging level (default from CT_LOG_LEVEL)")
    sp = p.add_subparsers(dest="cmd", required=True)

    pc = sp.add_parser("compute", help="Compute one case and print stage times")
    pc.add_argument("case", nargs="?", help="JSON file with 'input' and 'options'")
    pc.add_argument("--example", help="Run a recorded example by name instead")
    pc.add_argument("--debug", action="store_true", help="Print every assembly phase")
    pc.add_argument("--json", action="store_true", help="Print the full trace as JSON")
    pc.add_argument("--xlsx", help="Write the trace workbook here")
    pc.set_defaults(func=_cmd_compute)

    pb = sp.add_parser("batch", help="Compute every row of a parts CSV")
    pb.add_argument("csv_file", help="Input CSV (see 'template')")
    pb.add_argument("--csv", help="Write results CSV here instead of stdout")
    pb.add_argument("--xlsx", help="Write results workbook here")
    pb.set_defaults(func=_cmd_batch)

    pt = sp.add_parser("template", help="Print an example batch CSV")
    pt.set_defaults(func=_cmd_template)

    pk = sp.add_parser("check-tables", help="Validate the lookup tables")
    pk.set_defaults(func=_cmd_check_tables)
    return p


def main(argv=None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        return int(args.func(args))
    except ReferenceDataError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
