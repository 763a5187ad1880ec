"""Tests for the cooling time calculation."""

import math
from dataclasses import replace

import pytest

from calculations.cooling import (
    compute_cooling_time, compute_cooling_time_detailed, conduction_time, effective_thickness
)


def test_conduction_formula():
    expected = 4 / (math.pi ** 2 * 0.09) * math.log(4 / math.pi * 190 / 50)
    assert conduction_time(2, 230, 40, 90, 0.09) == pytest.approx(expected)
    assert conduction_time(2, 230, 40, 90, 0) == 0
    assert conduction_time(2, 230, 40, 40, 0.09) == 0
    assert conduction_time(2, 30, 40, 90, 0.09) == 0


def test_base_thickness_steps(tables):
    assert effective_thickness(2.5, 'BASE', tables) == 2.4
    assert effective_thickness(3.7, 'BASE', tables) == 2.8
    assert effective_thickness(0.2, 'BASE', tables) == 1.95
    assert effective_thickness(80, 'BASE', tables) == 3.0
    assert effective_thickness(3.7, 'LOGIC', tables) == 3.7


def test_small_machine_hits_minimum(base_input, base_options, tables):
    result = compute_cooling_time_detailed(base_input, base_options, tables)

    assert result.value == 11.5
    assert result.debug.applied_min_cooling
    assert result.debug.clamp_force_reference_ton == 60
    assert result.debug.clamp_offset_s == -3.5
    assert result.debug.grade_extra_s == 1.0


def test_thick_abs_on_large_clamp(base_input, base_options, tables):
    part = replace(base_input, resin='ABS', grade='HF-0660I', thickness_mm=4, clamp_force_ton=350)
    result = compute_cooling_time_detailed(part, base_options, tables)

    base = conduction_time(2.9, 240, 60, 85, 0.11)
    assert result.debug.effective_thickness_mm == 2.9
    assert result.debug.clamp_offset_s == 2.0
    assert result.value == pytest.approx(max(base + 1.5 + 2.0, 11.5))


def test_logic_option_skips_grade_extra(base_input, base_options, tables):
    part = replace(base_input, resin='PC', grade='3022R', thickness_mm=3.5, clamp_force_ton=600)
    logic = compute_cooling_time_detailed(part, replace(base_options, cooling_option='LOGIC'), tables)

    assert logic.debug.grade_extra_s == 0
    assert logic.debug.effective_thickness_mm == 3.5
    assert logic.value == pytest.approx(max(conduction_time(3.5, 300, 90, 125, 0.12) + 3.0, 11.5))


def test_unknown_option_treated_as_base(base_input, base_options, tables):
    result = compute_cooling_time_detailed(base_input, replace(base_options, cooling_option='FAST'), tables)
    assert result.debug.option == 'BASE'


def test_unknown_grade_returns_exact_minimum(base_input, base_options, tables):
    result = compute_cooling_time_detailed(replace(base_input, grade='UNKNOWN'), base_options, tables)

    assert result.value == 11.5
    assert not result.debug.grade_matched
    assert result.debug.matched_key is None


def test_glass_filled_alias_uses_base_resin_row(base_input, base_options, tables):
    """PET GF30 has no rows of its own and reads the PET row."""
    part = replace(base_input, resin='PET GF30', grade='8300SE', thickness_mm=5, clamp_force_ton=450)
    result = compute_cooling_time_detailed(part, base_options, tables)

    assert result.debug.grade_matched
    assert result.debug.matched_key == 'PET||8300SE'


def test_minimum_comes_from_tables(base_input, base_options, tables):
    lowered = tables.with_tables(defaults=replace(tables.defaults, min_cooling_time_s=2.0))
    value = compute_cooling_time(base_input, base_options, lowered)

    assert value < 11.5
    assert value >= 2.0
