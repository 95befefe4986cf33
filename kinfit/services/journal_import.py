from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Dict, List, Optional

from loguru import logger
from sqlalchemy import delete, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Exercise, User, Workout, new_id
from ..settings import get_settings
from .catalog import find_catalog_exercise
from .entries import ExerciseEntry, entry_to_document
from .journal import (
    ExtractedExercise,
    ParsedWorkout,
    generate_summary,
    normalize_for_lookup,
    parse_journal_file,
)

PREVIEW_EXERCISES = 10
PREVIEW_WORKOUTS = 5


@dataclass
class ImportOptions:
    dry_run: bool = False
    clear_existing: bool = False
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    journal_path: Optional[str] = None


@dataclass
class ImportReport:
    exercises: int = 0
    workouts_seeded: int = 0
    workouts_skipped: int = 0
    unresolved_exercises: List[str] = field(default_factory=list)


def find_exercise_id(exercise_name: str, exercise_ids: Dict[str, str]) -> Optional[str]:
    """Resolve a journal exercise name to a catalog id.

    Exact lowercase match first, then the normalized name, then containment in
    either direction. Containment ties go to the longest catalog name, then the
    alphabetically first one.
    """
    lower_name = exercise_name.lower()
    normalized = normalize_for_lookup(exercise_name)

    if lower_name in exercise_ids:
        return exercise_ids[lower_name]
    if normalized in exercise_ids:
        return exercise_ids[normalized]

    candidates = [
        key
        for key in exercise_ids
        if key in normalized or normalized in key or key in lower_name or lower_name in key
    ]
    if not candidates:
        return None
    if len(candidates) > 1:
        logger.debug(f"[kinfit] import: {exercise_name!r} matches {len(candidates)} catalog names {candidates}")
    best = sorted(candidates, key=lambda key: (-len(key), key))[0]
    return exercise_ids[best]


async def seed_exercises(
    session: Optional[AsyncSession],
    exercises: List[ExtractedExercise],
    options: ImportOptions,
) -> Dict[str, str]:
    exercise_ids: Dict[str, str] = {}

    if options.dry_run:
        logger.info(f"[kinfit] import: [DRY RUN] would seed {len(exercises)} exercises")
        for i, ex in enumerate(exercises):
            exercise_ids[ex.name.lower()] = new_id()
            if i < PREVIEW_EXERCISES:
                logger.info(f"[kinfit] import:   - {ex.name} [{', '.join(ex.muscle_groups)}]")
        if len(exercises) > PREVIEW_EXERCISES:
            logger.info(f"[kinfit] import:   ... and {len(exercises) - PREVIEW_EXERCISES} more")
        return exercise_ids

    logger.info(f"[kinfit] import: seeding {len(exercises)} exercises")
    for ex in exercises:
        existing = await find_catalog_exercise(session, ex.name)
        if existing is None:
            existing = Exercise(
                name=ex.name,
                muscle_groups=list(ex.muscle_groups),
                category=ex.category,
                is_custom=False,
            )
            session.add(existing)
            await session.flush()
        exercise_ids[ex.name.lower()] = existing.id

    await session.commit()
    logger.info(f"[kinfit] import: seeded {len(exercise_ids)} exercises")
    return exercise_ids


def _day_bounds(day: datetime) -> tuple:
    return datetime.combine(day.date(), time.min), datetime.combine(day.date(), time.max)


def _entries_for(workout: ParsedWorkout, exercise_ids: Dict[str, str], report: ImportReport) -> List[dict]:
    entries: List[dict] = []
    for ex in workout.exercises:
        if ex.sets <= 0 or ex.reps <= 0:
            continue
        exercise_id = find_exercise_id(ex.exercise_name, exercise_ids)
        if exercise_id is None:
            logger.warning(f"[kinfit] import: exercise not found: {ex.exercise_name!r}")
            report.unresolved_exercises.append(ex.exercise_name)
            continue
        entry = ExerciseEntry(
            exercise_id=exercise_id,
            exercise_name=ex.exercise_name,
            category="strength",
            weight_value=ex.weight_value,
            weight_type=ex.weight_type,
            reps=ex.reps,
            sets=max(1, ex.sets),
            notes=ex.notes or "",
            order_index=ex.order_index,
        )
        entries.append(entry_to_document(entry))
    return entries


async def seed_workouts(
    session: Optional[AsyncSession],
    workouts: List[ParsedWorkout],
    exercise_ids: Dict[str, str],
    user_id: str,
    options: ImportOptions,
    report: Optional[ImportReport] = None,
) -> int:
    report = report or ImportReport()
    # Symbolized workouts carry no real set data
    valid = [w for w in workouts if not w.is_symbolized and w.exercises]

    if options.dry_run:
        logger.info(
            f"[kinfit] import: [DRY RUN] would seed {len(valid)} workouts "
            f"(skipping {len(workouts) - len(valid)} symbolized/empty)"
        )
        for w in valid[:PREVIEW_WORKOUTS]:
            logger.info(f"[kinfit] import:   - {w.date.date().isoformat()} ({w.title}): {len(w.exercises)} exercises")
        if len(valid) > PREVIEW_WORKOUTS:
            logger.info(f"[kinfit] import:   ... and {len(valid) - PREVIEW_WORKOUTS} more")
        report.workouts_seeded = len(valid)
        return len(valid)

    logger.info(f"[kinfit] import: seeding {len(valid)} workouts")

    if options.clear_existing:
        deleted = await session.exec(delete(Workout).where(Workout.owner_id == user_id))
        logger.info(f"[kinfit] import: cleared {deleted.rowcount} existing workouts for user")

    seeded = 0
    skipped = 0
    for w in valid:
        start, end = _day_bounds(w.date)
        exists = await session.exec(
            select(Workout).where(Workout.owner_id == user_id, Workout.date >= start, Workout.date <= end)
        )
        if exists.first() is not None and not options.clear_existing:
            skipped += 1
            continue

        entries = _entries_for(w, exercise_ids, report)
        if not entries:
            skipped += 1
            continue

        session.add(
            Workout(
                owner_id=user_id,
                date=w.date,
                title=w.title,
                notes=w.notes,
                visibility="private",
                exercises=entries,
                duration=w.duration,
                tags=list(w.tags),
            )
        )
        await session.flush()
        seeded += 1

    await session.commit()
    logger.info(f"[kinfit] import: seeded {seeded} workouts (skipped {skipped} duplicates/empty)")
    report.workouts_seeded = seeded
    report.workouts_skipped = skipped
    return seeded


async def resolve_user(session: Optional[AsyncSession], options: ImportOptions) -> str:
    if options.user_id:
        logger.info(f"[kinfit] import: using user id {options.user_id}")
        return options.user_id
    if options.dry_run:
        return new_id()

    if options.user_email:
        result = await session.exec(select(User).where(User.email == options.user_email))
        user = result.first()
        if user is None:
            raise LookupError(f"User not found with email: {options.user_email}")
        logger.info(f"[kinfit] import: found user {user.display_name or user.username} ({user.email})")
        return user.id

    email = get_settings().journal_import_email
    result = await session.exec(select(User).where(User.email == email))
    user = result.first()
    if user is None:
        user = User(email=email, username="journaluser", display_name="Journal Import User")
        session.add(user)
        await session.commit()
        logger.warning(f"[kinfit] import: created placeholder user {email}")
    return user.id


async def import_journal(session: Optional[AsyncSession], options: ImportOptions) -> ImportReport:
    """Parse the journal and write its exercises and workouts.

    In dry-run mode ``session`` may be None; nothing is written. Storage errors
    propagate to the caller; a partial import is not rolled back.
    """
    journal_path = options.journal_path or get_settings().journal_path
    logger.info(f"[kinfit] import: parsing {journal_path}")
    parsed = parse_journal_file(journal_path)
    summary = generate_summary(parsed.workouts, parsed.exercises)
    logger.info(
        f"[kinfit] import: {summary.total_workouts} workouts ({summary.actual_workouts} valid), "
        f"{summary.unique_exercises} unique exercises, "
        f"{len(parsed.skipped)} entries skipped"
    )
    if options.dry_run:
        logger.info("[kinfit] import: DRY RUN - no changes will be made to the database")

    report = ImportReport()
    user_id = await resolve_user(session, options)
    exercise_ids = await seed_exercises(session, parsed.exercises, options)
    report.exercises = len(exercise_ids)
    seeded = await seed_workouts(session, parsed.workouts, exercise_ids, user_id, options, report)

    if not options.dry_run and seeded > 0:
        count = await session.exec(select(func.count()).select_from(Workout).where(Workout.owner_id == user_id))
        total = count.one()
        user = await session.get(User, user_id)
        if user is not None:
            user.total_workouts = total
            session.add(user)
            await session.commit()
            logger.info(f"[kinfit] import: updated user's total workouts to {total}")

    logger.info("[kinfit] import: complete")
    return report
