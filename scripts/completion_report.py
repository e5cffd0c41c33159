"""Score a profile export and render a completion report.

This script reads a profile export (CSV, JSON or JSON lines, one profile per
row), scores every profile against its cohort checklist, and produces:

- A scored CSV with one row per profile
- A Markdown report listing the least complete profiles first, with the
  checklist items each one is missing

Note: Nothing is written back to the profile store.
"""

from __future__ import annotations

from pathlib import Path
from typing import List
import pandas as pd
import argparse
from datetime import datetime
import sys

# Ensure project root (parent of scripts/) is on sys.path for package imports
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from profile_completion.batch import read_profiles, score_profiles, summarize_scores
from profile_completion.data_models import Cohort
from profile_completion.ingest import clean_record, get_alias_value
from profile_completion.settings import load_settings, setup_logging


def attach_nicknames(scored: pd.DataFrame, profiles: pd.DataFrame) -> pd.DataFrame:
    """Add a readable `nickname` column to the scored rows.

    Rows are matched by position: `score_profiles` emits exactly one row per
    input row, in order.

    Args:
        scored: Output of `score_profiles`.
        profiles: The export the scores were computed from.

    Returns:
        Copy of `scored` with a `nickname` column.
    """
    out = scored.copy()
    records = profiles.astype(object).where(pd.notnull(profiles), None).to_dict(orient="records")
    out["nickname"] = [get_alias_value(clean_record(r), "nickname") or "" for r in records]
    return out


def render_markdown(scored: pd.DataFrame, out_path_md: Path, limit: int = 50) -> None:
    """Render a Markdown report from scored profiles.

    The report includes the per-cohort summary and, for the `limit` least
    complete profiles, their score and missing checklist items.

    Args:
        scored: Output of `score_profiles` (optionally with `nickname`).
        out_path_md: Destination file path for the Markdown report.
        limit: Maximum number of profiles listed individually.
    """
    lines: List[str] = []
    ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    lines.append("# Profile Completion Report\n")
    lines.append(f"Generated: {ts}\n")
    lines.append(f"Total profiles: {len(scored)}\n")

    summary = summarize_scores(scored)
    if not summary.empty:
        lines.append("| cohort | profiles | mean % | min % | max % | complete |")
        lines.append("|---|---|---|---|---|---|")
        for _, r in summary.iterrows():
            lines.append(
                f"| {r['cohort']} | {r['profiles']} | {r['mean_percentage']} | "
                f"{r['min_percentage']} | {r['max_percentage']} | {r['complete']} |"
            )
        lines.append("")

    df = scored.sort_values(["percentage", "profile_id"], ascending=[True, True]).head(limit)
    for _, row in df.iterrows():
        name = str(row.get("nickname") or "").strip() or "(no nickname)"
        lines.append(f"## {row['profile_id']} — {name}: {row['percentage']}%\n")
        lines.append(f"Cohort: {row['cohort']} ({row['completed_count']}/{row['total_count']})\n")
        missing = [m for m in str(row.get("missing_fields") or "").split("|") if m]
        if missing:
            lines.append("Missing:")
            for field_name in missing:
                lines.append(f"- {field_name}")
            lines.append("")
        else:
            lines.append("Profile complete.\n")

    out_path_md.parent.mkdir(parents=True, exist_ok=True)
    out_path_md.write_text("\n".join(lines), encoding="utf-8")
    return None


def main(argv: List[str] | None = None) -> None:
    """CLI entrypoint: read export, score, write CSV and Markdown."""
    parser = argparse.ArgumentParser(description="Score a profile export and render a completion report")
    parser.add_argument("--profiles", type=Path, required=True, help="Path to the profile export")
    parser.add_argument("--out-dir", type=Path, default=Path("reports"), help="Output directory for report files")
    parser.add_argument("--cohort", choices=[c.value for c in Cohort], default=None, help="Force a cohort for every profile")
    parser.add_argument("--limit", type=int, default=50, help="Profiles listed individually in the report")
    args = parser.parse_args(argv)

    settings = load_settings()
    setup_logging(settings.log_level)

    print(f"[1/3] Loading profiles: {args.profiles}")
    profiles = read_profiles(args.profiles)

    print(f"[2/3] Scoring {len(profiles)} profiles…")
    cohort = Cohort(args.cohort) if args.cohort else None
    scored = attach_nicknames(score_profiles(profiles, cohort=cohort, settings=settings), profiles)

    args.out_dir.mkdir(parents=True, exist_ok=True)
    out_csv = args.out_dir / "completion_scored.csv"
    print(f"Writing scored CSV: {out_csv}")
    scored.to_csv(out_csv, index=False)

    out_md = args.out_dir / "completion_report.md"
    print(f"[3/3] Rendering Markdown report: {out_md}")
    render_markdown(scored, out_md, limit=args.limit)
    print("Done.")
    return None


if __name__ == "__main__":
    main()
