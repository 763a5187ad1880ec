"""Sanity checks for a loaded tables bundle."""

from dataclasses import dataclass, field
from typing import Callable, List, Sequence

from .models import TablesBundle

EXPECTED_CLAMP_CONTROLS = ('Logic valve', 'Proportional valve', 'ServoValve')


@dataclass
class TableCheckResult:
    """Result of a tables bundle check."""
    ok: bool
    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        if self.ok and not self.warnings:
            return "Tables OK"
        elif self.ok:
            return f"Tables OK with warnings: {'; '.join(self.warnings)}"
        else:
            return f"Tables NOT usable: {'; '.join(self.issues)}"


def _check_bins(name: str, rows: Sequence, key: Callable, issues: List[str], warnings: List[str]):
    if not rows:
        issues.append(f"{name} is empty")
        return
    keys = [key(row) for row in rows]
    if any(b < a for a, b in zip(keys, keys[1:])):
        warnings.append(f"{name} thresholds are not ascending (lookups sort them, the workbook does not)")
    if len(set(keys)) != len(keys):
        warnings.append(f"{name} has duplicate thresholds")


def validate_tables(tables: TablesBundle) -> TableCheckResult:
    """Check a bundle for the gaps that silently change results.

    Args:
        tables: Loaded tables bundle

    Returns:
        TableCheckResult with blocking issues and softer warnings
    """
    issues = []
    warnings = []

    _check_bins("Cooling clamp force reference", tables.clamp_force_reference,
                lambda r: r.clamp_force_ton, issues, warnings)
    _check_bins("Cooling thickness reference", tables.thickness_reference,
                lambda r: r.input_mm, issues, warnings)
    _check_bins("Clamp force stage adders", tables.clamp_force_stage_adders,
                lambda r: r.clamp_force_threshold, issues, warnings)
    _check_bins("Eject stroke multipliers", tables.eject_stroke_multipliers,
                lambda r: r.eject_stroke_mm, issues, warnings)
    _check_bins("Robot time by clamp force", tables.robot_time_by_clamp_force,
                lambda r: r.min_clamp_force, issues, warnings)
    _check_bins("Sprue length by weight", tables.sprue_length_by_weight,
                lambda r: r.max_weight, issues, warnings)

    if not tables.cooling_grades:
        issues.append("Cooling grade table is empty - every cooling time falls to the minimum")
    for grade in tables.cooling_grades:
        if grade.alpha <= 0:
            warnings.append(f"Grade {grade.key} has no thermal diffusivity")
        if grade.melt_density_g_cm3 <= 0:
            warnings.append(f"Grade {grade.key} has no melt density - fill volume will be zero")

    labels = [row.clamp_control for row in tables.clamp_control_table]
    for expected in EXPECTED_CLAMP_CONTROLS:
        if expected not in labels:
            issues.append(f"Clamp control table is missing '{expected}'")

    if not tables.open_close_speed_control:
        issues.append("Open/close speed control table is empty")
    if not tables.ejecting_speed_control:
        issues.append("Ejecting speed control table is empty")

    no_pack = tables.fill_pack.no_pack_mold_type
    if tables.find_mold_rule(no_pack) is None:
        warnings.append(f"No-pack mold type '{no_pack}' has no mold-type rule row")

    known_resins = {grade.resin for grade in tables.cooling_grades}
    for alias, target in tables.resin_aliases.items():
        if target not in known_resins and alias not in known_resins:
            warnings.append(f"Resin alias '{alias}' -> '{target}' points at no cooling grade rows")

    if not tables.fill_pack.runner_weight_bins or not tables.fill_pack.vp_lookup:
        warnings.append("Fill V/P lookup bins are empty - fill stroke is never capped")

    return TableCheckResult(ok=len(issues) == 0, issues=issues, warnings=warnings)
