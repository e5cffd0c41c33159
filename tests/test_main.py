"""Tests for the typer CLI."""

import json

import pandas as pd
from typer.testing import CliRunner

from profile_completion.main import app


runner = CliRunner()


def _write_json(path, payload):
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return path


def test_score_command(tmp_path):
    record = _write_json(tmp_path / "record.json", {
        "name": "Yui",
        "gender": "female",
        "age": 27,
        "birth_date": "1998-01-20",
        "prefecture": "大阪府",
        "language_skills": [{"language": "en", "level": "intermediate"}],
        "culture_tags": ["ikebana"],
    })
    images = _write_json(tmp_path / "images.json", [{"id": "1", "url": "https://cdn.example.com/a.jpg"}])

    result = runner.invoke(app, ["score", str(record), "--images", str(images)])

    assert result.exit_code == 0, result.output
    assert "57%" in result.output
    assert "(8/14)" in result.output


def test_score_command_applies_edits(tmp_path):
    record = _write_json(tmp_path / "record.json", {"name": "Yui", "gender": "female"})
    edits = _write_json(tmp_path / "edits.json", {"nickname": ""})

    result = runner.invoke(app, ["score", str(record), "--edits", str(edits), "--cohort", "cohort-A"])

    assert result.exit_code == 0, result.output
    assert "(1/14)" in result.output


def test_score_command_rejects_unknown_cohort(tmp_path):
    record = _write_json(tmp_path / "record.json", {"name": "Yui"})

    result = runner.invoke(app, ["score", str(record), "--cohort", "cohort-C"])

    assert result.exit_code != 0


def test_score_command_rejects_non_object(tmp_path):
    record = _write_json(tmp_path / "record.json", ["not", "an", "object"])

    result = runner.invoke(app, ["score", str(record)])

    assert result.exit_code != 0


def test_batch_command(tmp_path):
    export = tmp_path / "profiles.csv"
    pd.DataFrame([
        {"id": "u-1", "name": "Hanako", "gender": "female"},
        {"id": "u-2", "name": "Michael", "gender": "male", "nationality": "Canada"},
    ]).to_csv(export, index=False)
    out = tmp_path / "scored.csv"

    result = runner.invoke(app, ["batch", str(export), "--out-path", str(out)])

    assert result.exit_code == 0, result.output
    scored = pd.read_csv(out)
    assert list(scored["profile_id"]) == ["u-1", "u-2"]
    assert list(scored["cohort"]) == ["cohort-A", "cohort-B"]


def test_batch_command_missing_file(tmp_path):
    result = runner.invoke(app, ["batch", str(tmp_path / "missing.csv")])

    assert result.exit_code == 1


def test_checklist_command():
    result = runner.invoke(app, ["checklist"])

    assert result.exit_code == 0, result.output
    assert "14 items" in result.output
    assert "17 items" in result.output
    assert "travel_companion" in result.output
