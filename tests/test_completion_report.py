"""Tests for scripts/completion_report.py."""

import importlib.util
from pathlib import Path

import pandas as pd
import pytest


SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "completion_report.py"


@pytest.fixture(scope="module")
def report_module():
    module_spec = importlib.util.spec_from_file_location("completion_report", SCRIPT)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


@pytest.fixture
def export_csv(tmp_path):
    path = tmp_path / "profiles.csv"
    pd.DataFrame([
        {"id": "u-1", "name": "Hanako", "gender": "female", "prefecture": "東京都"},
        {"id": "u-2", "name": "", "gender": "male", "nationality": "Canada"},
    ]).to_csv(path, index=False)
    return path


def test_writes_csv_and_markdown(report_module, export_csv, tmp_path):
    out_dir = tmp_path / "reports"

    report_module.main(["--profiles", str(export_csv), "--out-dir", str(out_dir)])

    scored = pd.read_csv(out_dir / "completion_scored.csv")
    assert list(scored["profile_id"]) == ["u-1", "u-2"]
    assert scored.loc[0, "nickname"] == "Hanako"

    report = (out_dir / "completion_report.md").read_text(encoding="utf-8")
    assert report.startswith("# Profile Completion Report")
    assert "## u-2 — (no nickname): 11%" in report
    assert "- travel_companion" in report
    # least complete profile is listed first
    assert report.index("## u-2") < report.index("## u-1")


def test_limit(report_module, export_csv, tmp_path):
    out_dir = tmp_path / "reports"

    report_module.main(["--profiles", str(export_csv), "--out-dir", str(out_dir), "--limit", "1"])

    report = (out_dir / "completion_report.md").read_text(encoding="utf-8")
    assert "## u-2" in report
    assert "## u-1" not in report
