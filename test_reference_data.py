"""Tests for loading and validating the lookup tables."""

import json

import pytest

from reference_data import (
    ReferenceDataError, TablesBundle, load_raw_tables, load_tables, validate_tables
)
from reference_data.loader import TABLE_FILES


def test_bundled_tables_load(tables):
    assert len(tables.mold_type_rules) == 5
    assert tables.find_mold_rule('Gas INJ.').pack_zero
    assert tables.find_mold_rule('Nope') is None
    assert tables.defaults.min_cooling_time_s == 11.5
    assert tables.defaults.rounding == 2
    assert tables.fill_pack.vp_lookup[0] == (1, 30)
    assert tables.resin_aliases == {'PET GF30': 'PET'}


def test_loaded_mappings_are_read_only(tables):
    with pytest.raises(TypeError):
        tables.resin_aliases['ABS'] = 'PC'
    with pytest.raises(TypeError):
        tables.find_mold_rule('Double INJ.').stage_add_s['fill'] = 9.0
    assert tables.find_mold_rule('Double INJ.').stage_add_s == {'fill': 0.5}


def test_bundled_tables_validate(tables):
    result = validate_tables(tables)

    assert result.ok, str(result)
    assert result.warnings == []
    assert str(result) == "Tables OK"


def test_missing_files_give_empty_tables(tmp_path):
    bundle = load_tables(tmp_path)

    assert bundle.mold_type_rules == ()
    assert bundle.defaults.safety_factor == pytest.approx(0.10)
    assert bundle.fill_pack.no_pack_mold_type == 'Gas INJ.'


def test_bad_json_raises(tmp_path):
    (tmp_path / 'moldTypeRules.json').write_text('[{"mold_type": ', encoding='utf-8')
    with pytest.raises(ReferenceDataError, match="not valid JSON"):
        load_raw_tables(tmp_path)


def test_wrong_shape_raises(tmp_path):
    (tmp_path / 'resinAliases.json').write_text('["PET"]', encoding='utf-8')
    with pytest.raises(ReferenceDataError, match="should hold a JSON dict"):
        load_tables(tmp_path)


def test_every_table_file_is_shipped():
    from config import TABLES_PATH
    for name, _empty in TABLE_FILES.values():
        assert (TABLES_PATH / name).exists(), name


def test_validation_flags_gaps(tmp_path):
    (tmp_path / 'clampControlTable.json').write_text(
        json.dumps([{"clamp_control": "Logic valve", "closing_speed_percent": 70}]), encoding='utf-8')
    (tmp_path / 'robotTimeByClampForce.json').write_text(
        json.dumps([{"min_clamp_force": 100, "robot_time_s": 2}, {"min_clamp_force": 0, "robot_time_s": 1}]),
        encoding='utf-8')
    result = validate_tables(load_tables(tmp_path))

    assert not result.ok
    assert "Clamp control table is missing 'ServoValve'" in result.issues
    assert any("not ascending" in w for w in result.warnings)
    assert str(result).startswith("Tables NOT usable")


def test_from_dict_accepts_numeric_strings():
    bundle = TablesBundle.from_dict({
        'robot_time_by_clamp_force': [{'min_clamp_force': '150', 'robot_time_s': '2.5'}],
        'defaults': {'rounding': '1', 'safety_factor': 'n/a'},
        'cooling': {'min_cooling_time_s': 9},
    })

    assert bundle.robot_time_by_clamp_force[0].min_clamp_force == 150
    assert bundle.defaults.rounding == 1
    assert bundle.defaults.safety_factor == pytest.approx(0.10)
    assert bundle.defaults.min_cooling_time_s == 9


def test_with_tables_leaves_original(tables):
    swapped = tables.with_tables(mold_type_rules=())
    assert swapped.find_mold_rule('Gas INJ.') is None
    assert tables.find_mold_rule('Gas INJ.') is not None
