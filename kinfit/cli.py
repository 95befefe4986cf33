"""Kinfit command line: journal import, journal preview and catalog seeding.

    kinfit import-journal --dry-run
    kinfit import-journal --email=me@example.com --clear
    kinfit parse-journal --journal "assets/Gym Journal 2025.txt"
    kinfit seed-exercises
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from .db import get_session, init_db
from .logger import setup_logger
from .services.catalog import seed_default_exercises
from .services.journal import generate_summary, parse_journal_file
from .services.journal_import import ImportOptions, ImportReport, import_journal
from .settings import get_settings

app = typer.Typer(
    name="kinfit",
    help="Kinfit maintenance commands",
    add_completion=False,
)


@app.callback()
def main(log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL")) -> None:
    settings = get_settings()
    setup_logger(level=log_level or settings.log_level, log_file=settings.log_file)


async def _run_import(options: ImportOptions) -> ImportReport:
    if options.dry_run:
        return await import_journal(None, options)
    await init_db()
    async with get_session() as session:
        return await import_journal(session, options)


@app.command("import-journal")
def import_journal_command(
    journal: Optional[str] = typer.Option(None, "--journal", help="Journal file (defaults to JOURNAL_PATH)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without writing to the database"),
    clear: bool = typer.Option(False, "--clear", help="Delete the user's workouts before importing"),
    user: Optional[str] = typer.Option(None, "--user", help="Owner user id"),
    email: Optional[str] = typer.Option(None, "--email", help="Owner email"),
) -> None:
    """Import exercises and workouts from the gym journal."""
    options = ImportOptions(
        dry_run=dry_run,
        clear_existing=clear,
        user_id=user,
        user_email=email,
        journal_path=journal,
    )
    logger.info(f"[kinfit] import options: {options}")
    try:
        report = asyncio.run(_run_import(options))
    except Exception:
        logger.exception("Error seeding from journal")
        raise typer.Exit(code=1)

    typer.echo(
        f"Exercises: {report.exercises}  "
        f"Workouts seeded: {report.workouts_seeded}  "
        f"Skipped: {report.workouts_skipped}  "
        f"Unresolved names: {len(report.unresolved_exercises)}"
    )


@app.command("parse-journal")
def parse_journal_command(
    journal: Optional[str] = typer.Option(None, "--journal", help="Journal file (defaults to JOURNAL_PATH)"),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", help="Where to write the parsed JSON"),
) -> None:
    """Parse the journal, print statistics and write the parsed JSON for review."""
    settings = get_settings()
    try:
        parsed = parse_journal_file(journal or settings.journal_path)
    except OSError:
        logger.exception("Error parsing journal")
        raise typer.Exit(code=1)
    summary = generate_summary(parsed.workouts, parsed.exercises)

    typer.echo("=" * 60)
    typer.echo("PARSING SUMMARY")
    typer.echo("=" * 60)
    typer.echo(f"Total Workouts:         {summary.total_workouts}")
    typer.echo(f"Actual Workouts:        {summary.actual_workouts}")
    typer.echo(f"Symbolized Workouts:    {summary.symbolized_workouts}")
    typer.echo(f"Unique Exercises:       {summary.unique_exercises}")
    typer.echo(f"Total Exercise Entries: {summary.total_exercise_entries}")
    typer.echo(f"Skipped Entries:        {len(parsed.skipped)}")
    if summary.start_date and summary.end_date:
        typer.echo(f"Date Range:             {summary.start_date.date()} - {summary.end_date.date()}")

    typer.echo("\nWorkouts by Month:")
    for month, count in summary.workouts_by_month.items():
        typer.echo(f"  {month}: {count}")

    typer.echo("\nWorkouts by Type:")
    for kind, count in sorted(summary.workouts_by_type.items(), key=lambda item: item[1], reverse=True):
        typer.echo(f"  {kind}: {count}")

    out = Path(output_dir or settings.journal_output_dir)
    out.mkdir(parents=True, exist_ok=True)
    exercises_path = out / "parsed_exercises.json"
    workouts_path = out / "parsed_workouts.json"
    exercises_path.write_text(
        json.dumps([e.model_dump(mode="json", by_alias=True) for e in parsed.exercises], indent=2),
        encoding="utf-8",
    )
    workouts_path.write_text(
        json.dumps(
            [w.model_dump(mode="json", by_alias=True, exclude_none=True) for w in parsed.workouts],
            indent=2,
        ),
        encoding="utf-8",
    )
    typer.echo(f"\nParsed data saved to:\n   - {exercises_path}\n   - {workouts_path}")


@app.command("seed-exercises")
def seed_exercises_command() -> None:
    """Insert the default exercise catalog (existing names are kept)."""

    async def _seed() -> int:
        await init_db()
        async with get_session() as session:
            return await seed_default_exercises(session)

    try:
        inserted = asyncio.run(_seed())
    except Exception:
        logger.exception("Error seeding exercises")
        raise typer.Exit(code=1)
    typer.echo(f"Inserted {inserted} exercises")


if __name__ == "__main__":
    app()
