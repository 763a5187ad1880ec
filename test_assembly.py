"""Tests for the assembly phases: robot gate, safety factor and rounding."""

from dataclasses import replace

import pytest

from calculations import compute_cycle_time, compute_cycle_time_with_debug
from calculations.assembly import apply_safety_factor, assemble_stages, resolve_safety_factor
from calculations.models import STAGES, InputData, Options, StageMap
from calculations.values import round_half_up


def test_robot_not_scaled_by_safety(base_input, base_options, tables):
    for factor in (0, 0.1, 0.5, 1.0):
        outputs = compute_cycle_time(base_input, replace(base_options, safety_factor=factor), tables)
        assert outputs.robot == 2.0


def test_robot_zero_when_toggle_off_or_no_stroke(base_input, base_options, tables):
    off = compute_cycle_time_with_debug(replace(base_input, robot_enabled=False), base_options, tables)
    no_stroke = compute_cycle_time_with_debug(base_input, replace(base_options, robot_stroke_mm=0), tables)

    assert off.outputs.robot == 0
    assert off.debug.robot_gate.override_reason == 'toggle'
    assert off.debug.after_mold.robot == 2.0
    assert no_stroke.outputs.robot == 0
    assert no_stroke.debug.robot_gate.override_reason == 'stroke'


def test_safety_factor_strictly_increases_total(base_input, base_options, tables):
    totals = [
        compute_cycle_time_with_debug(base_input, replace(base_options, safety_factor=f), tables).debug.raw_total
        for f in (0, 0.05, 0.1, 0.3)
    ]
    assert totals == sorted(totals)
    assert len(set(totals)) == len(totals)


def test_percent_like_safety_factor(tables):
    options = Options(safety_factor=15)
    assert resolve_safety_factor(options, tables) == pytest.approx(0.15)
    assert resolve_safety_factor(Options(safety_factor=None), tables) == pytest.approx(0.1)


def test_safety_skips_only_robot():
    stages = StageMap(fill=1, pack=1, cool=1, open=1, eject=1, robot=1, close=1)
    scaled = apply_safety_factor(stages, 0.2)

    assert scaled.robot == 1
    assert all(scaled.get(s) == pytest.approx(1.2) for s in STAGES if s != 'robot')


def test_total_rounded_from_unrounded_sum(base_input, base_options, tables):
    """Total 21.30 while the rounded stages add up to 21.29."""
    report = compute_cycle_time_with_debug(base_input, base_options, tables)
    debug = report.debug

    assert report.outputs.total == pytest.approx(21.30)
    assert debug.display_stage_sum == pytest.approx(21.29)
    assert debug.raw_total == pytest.approx(debug.after_safety.total())


@pytest.mark.parametrize("weight,clamp,thickness,factor", [
    (0.52, 90, 2, 0.1),
    (12.3, 180, 2.7, 0.07),
    (450, 850, 4.4, 0.13),
    (3.33, 333, 1.1, 0.0),
])
def test_total_and_stage_sum_stay_close(base_input, base_options, tables, weight, clamp, thickness, factor):
    part = replace(base_input, weight_g_1cav=weight, clamp_force_ton=clamp, thickness_mm=thickness)
    report = compute_cycle_time_with_debug(part, replace(base_options, safety_factor=factor), tables)
    debug = report.debug

    assert report.outputs.total == round_half_up(debug.raw_total, 2)
    assert abs(report.outputs.total - debug.display_stage_sum) <= len(STAGES) * 0.5 * 10 ** -2 + 1e-9


def test_phases_are_kept(base_input, base_options, tables):
    debug = compute_cycle_time_with_debug(replace(base_input, mold_type='Gas INJ.'), base_options, tables).debug

    assert debug.base.pack > 0
    assert debug.after_mold.pack == 0
    assert debug.after_mold.cool == pytest.approx(debug.base.cool + 2.0)
    assert debug.after_safety.cool == pytest.approx(debug.after_mold.cool * 1.1)
    assert debug.mold_adjustment.mold_type == 'Gas INJ.'


def test_rounding_digits_from_tables(base_input, base_options, tables):
    one_digit = tables.with_tables(defaults=replace(tables.defaults, rounding=1))
    outputs = compute_cycle_time(base_input, base_options, one_digit)

    assert outputs.total == pytest.approx(21.3)
    assert outputs.pack == pytest.approx(2.0)


def test_negative_inputs_are_clamped(base_options, tables):
    part = InputData(mold_type='General INJ.', resin='PP', grade='HJ500', cavity=3,
                     weight_g_1cav=-5, clamp_force_ton=-90, thickness_mm=-2, height_mm_eject=-1,
                     plate_type='4P')
    report = compute_cycle_time_with_debug(part, replace(base_options, mold_protection_mm=-10), tables)

    assert all(report.outputs.stages.get(s) >= 0 for s in STAGES)
    assert report.outputs.total > 0


def test_assemble_stages_clamps_base(base_input, base_options, tables):
    base = StageMap(fill=-1, pack=1, cool=1, open=1, eject=1, robot=1, close=1)
    result = assemble_stages(base, base_input, base_options, tables)

    assert result.base.fill == 0
    assert result.display.fill == 0
