from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich import print
from rich.table import Table

from .batch import read_profiles, score_profiles, summarize_scores
from .data_models import Cohort
from .ingest import build_snapshot, classify_cohort, merge_sources
from .scorer import checklist_for, logging_observer, score
from .settings import load_settings, setup_logging


app = typer.Typer(help="Profile completion scoring CLI")

AUTO = "auto"


def _parse_cohort(value: str) -> Optional[Cohort]:
	if value == AUTO:
		return None
	try:
		return Cohort(value)
	except ValueError:
		choices = ", ".join([AUTO] + [c.value for c in Cohort])
		raise typer.BadParameter(f"Unknown cohort '{value}'. Choose one of: {choices}")


def _load_json(path: Optional[Path]) -> Any:
	if path is None:
		return None
	if not path.exists():
		raise typer.BadParameter(f"File not found: {path}")
	try:
		return json.loads(path.read_text(encoding="utf-8"))
	except ValueError as e:
		raise typer.BadParameter(f"{path} is not valid JSON ({e})")


@app.command("score")
def score_record(
	record_path: Path = typer.Argument(..., help="Persisted profile record (JSON object)"),
	edits_path: Optional[Path] = typer.Option(None, "--edits", help="Unsaved form values (JSON object)"),
	images_path: Optional[Path] = typer.Option(None, "--images", help="Live image list (JSON array)"),
	cohort: str = typer.Option(AUTO, help="'auto', 'cohort-A' or 'cohort-B'"),
	log_level: Optional[str] = typer.Option(None, help="Override PROFILE_COMPLETION_LOG_LEVEL"),
):
	"""Score a single profile record and show the checklist."""
	settings = load_settings()
	logger = setup_logging(log_level or settings.log_level)
	record = _load_json(record_path)
	if not isinstance(record, dict):
		raise typer.BadParameter(f"{record_path} must contain a JSON object")
	edits = _load_json(edits_path)
	images = _load_json(images_path)

	merged = merge_sources(record, edits)
	chosen = _parse_cohort(cohort) or classify_cohort(merged, settings.home_nationalities)
	snapshot = build_snapshot(merged, images=images, cohort=chosen, settings=settings)
	result = score(snapshot, chosen, observer=logging_observer(logger))

	table = Table("item", "status")
	for item in result.items:
		table.add_row(item.field, "[green]done[/green]" if item.present else "[red]missing[/red]")
	print(table)
	print(
		f"[bold]{chosen.value}[/bold] completion: [bold]{result.percentage}%[/bold] "
		f"({result.completed_count}/{result.total_count}), has image: {result.has_image}"
	)


@app.command()
def batch(
	export_path: Path = typer.Argument(..., help="Profile export (.csv, .json or .jsonl)"),
	out_path: Optional[Path] = typer.Option(None, help="Where to write the scored CSV"),
	cohort: str = typer.Option(AUTO, help="'auto', 'cohort-A' or 'cohort-B'"),
	log_level: Optional[str] = typer.Option(None, help="Override PROFILE_COMPLETION_LOG_LEVEL"),
):
	"""Score every profile in an export and summarize per cohort."""
	settings = load_settings()
	setup_logging(log_level or settings.log_level)
	forced = _parse_cohort(cohort)
	try:
		df = read_profiles(export_path)
	except FileNotFoundError as e:
		print(f"[red]{e}[/red]")
		raise typer.Exit(code=1)

	scored = score_profiles(df, cohort=forced, settings=settings)
	out = out_path or export_path.with_name(f"{export_path.stem}_scored.csv")
	scored.to_csv(out, index=False)
	print(f"[green]Wrote {len(scored)} scores to[/green] {out}")

	summary = summarize_scores(scored)
	table = Table(*[str(c) for c in summary.columns])
	for _, r in summary.iterrows():
		table.add_row(*(str(r[c]) for c in summary.columns))
	print(table)


@app.command()
def checklist(
	cohort: str = typer.Option(AUTO, help="'auto' shows both cohorts"),
):
	"""Show which fields each cohort checklist contains."""
	chosen = _parse_cohort(cohort)
	cohorts = [chosen] if chosen is not None else list(Cohort)
	for c in cohorts:
		items = checklist_for(c)
		table = Table("#", "field", title=f"{c.value} ({len(items)} items)")
		for i, item in enumerate(items, start=1):
			table.add_row(str(i), item.field)
		print(table)


if __name__ == "__main__":
	app()
