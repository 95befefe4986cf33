from datetime import datetime

import pytest
from sqlalchemy import func
from sqlmodel import select

from kinfit.models import Exercise, User, Workout
from kinfit.services.catalog import DEFAULT_EXERCISES, find_catalog_exercise, seed_default_exercises
from kinfit.services.journal import ParsedExerciseEntry, ParsedWorkout
from kinfit.services.journal_import import (
    ImportOptions,
    ImportReport,
    find_exercise_id,
    import_journal,
    seed_workouts,
)

CATALOG = {
    "bench press": "bench",
    "lat pulldown": "lat",
    "single leg leg extension": "sl-ext",
    "row": "row",
    "seated row": "seated-row",
}


def test_find_exercise_id_exact_and_normalized():
    assert find_exercise_id("Bench Press", CATALOG) == "bench"
    assert find_exercise_id("Lat PD", CATALOG) == "lat"
    assert find_exercise_id("SL Leg Ext", CATALOG) == "sl-ext"


def test_find_exercise_id_fuzzy_prefers_longest_name():
    assert find_exercise_id("Incline Bench Press", CATALOG) == "bench"
    # both "row" and "seated row" are contained in the name
    assert find_exercise_id("Seated Row Machine", CATALOG) == "seated-row"
    assert find_exercise_id("Bench", CATALOG) == "bench"


def test_find_exercise_id_without_match():
    assert find_exercise_id("Zottman Curl", CATALOG) is None
    assert find_exercise_id("Squat", {}) is None


async def test_import_journal(session, journal_file):
    report = await import_journal(session, ImportOptions(journal_path=str(journal_file)))

    assert report.exercises == 5
    assert report.workouts_seeded == 2
    assert report.workouts_skipped == 0
    assert report.unresolved_exercises == []

    user = (await session.exec(select(User).where(User.email == "journal@kinfit.app"))).one()
    assert user.total_workouts == 2

    workouts = (await session.exec(select(Workout).order_by(Workout.date))).all()
    assert [w.date for w in workouts] == [datetime(2025, 1, 5), datetime(2025, 1, 7)]
    first, second = workouts
    assert first.owner_id == user.id
    assert first.tags == ["chest", "back"]
    assert first.duration == 60
    assert first.notes == "good pump"
    assert first.total_volume == 90 * 10 * 3 + 50 * 12 * 3
    assert first.exercises[0]["setEntries"] == [{"weightValue": 90.0, "weightType": "a", "reps": 10, "sets": 3}]
    assert first.exercises[0]["category"] == "strength"
    assert [e["orderIndex"] for e in first.exercises] == [0, 1]
    # zero-rep Leg Ext line is dropped
    assert [e["exerciseName"] for e in second.exercises] == ["Squat"]

    names = (await session.exec(select(Exercise.name))).all()
    assert sorted(names) == ["Bench Press", "Curl", "Lat Pulldown", "Leg Extension", "Squat"]


async def test_reimport_does_not_duplicate(session, journal_file):
    options = ImportOptions(journal_path=str(journal_file))
    await import_journal(session, options)
    report = await import_journal(session, options)

    assert report.workouts_seeded == 0
    assert report.workouts_skipped == 2
    assert (await session.exec(select(func.count()).select_from(Workout))).one() == 2
    assert (await session.exec(select(func.count()).select_from(Exercise))).one() == 5


async def test_clear_reseeds(session, journal_file, user):
    options = ImportOptions(journal_path=str(journal_file), user_id=user.id)
    await import_journal(session, options)

    options.clear_existing = True
    report = await import_journal(session, options)

    assert report.workouts_seeded == 2
    assert (await session.exec(select(func.count()).select_from(Workout))).one() == 2
    await session.refresh(user)
    assert user.total_workouts == 2


async def test_import_for_existing_email(session, journal_file, user):
    await import_journal(session, ImportOptions(journal_path=str(journal_file), user_email=user.email))
    owners = (await session.exec(select(Workout.owner_id))).all()
    assert set(owners) == {user.id}


async def test_unknown_email_fails(session, journal_file):
    with pytest.raises(LookupError):
        await import_journal(session, ImportOptions(journal_path=str(journal_file), user_email="nobody@example.com"))


async def test_dry_run_writes_nothing(journal_file):
    report = await import_journal(None, ImportOptions(dry_run=True, journal_path=str(journal_file)))
    assert report.exercises == 5
    assert report.workouts_seeded == 2


async def test_unresolved_exercises_are_reported(session, user):
    workouts = [
        ParsedWorkout(
            date=datetime(2025, 2, 1),
            title="arms",
            exercises=[ParsedExerciseEntry(exercise_name="Zottman Curl", weight_value=10, weight_type="e", reps=10, sets=3)],
        ),
        ParsedWorkout(
            date=datetime(2025, 2, 3),
            title="chest",
            exercises=[
                ParsedExerciseEntry(exercise_name="Bench Press", weight_value=80, weight_type="a", reps=8, sets=3),
                ParsedExerciseEntry(exercise_name="Zottman Curl", weight_value=10, weight_type="e", reps=10, sets=3, order_index=1),
            ],
        ),
    ]
    report = ImportReport()
    seeded = await seed_workouts(session, workouts, {"bench press": "bench"}, user.id, ImportOptions(), report)

    assert seeded == 1
    assert report.workouts_skipped == 1
    assert report.unresolved_exercises == ["Zottman Curl", "Zottman Curl"]
    workout = (await session.exec(select(Workout))).one()
    assert [e["exerciseId"] for e in workout.exercises] == ["bench"]


async def test_seed_default_exercises(session):
    assert await seed_default_exercises(session) == len(DEFAULT_EXERCISES)
    assert await seed_default_exercises(session) == 0

    found = await find_catalog_exercise(session, "bench press")
    assert found is not None
    assert found.name == "Bench Press"
