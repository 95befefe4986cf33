from datetime import datetime

import pytest

from kinfit.services.journal import (
    ParsedExerciseEntry,
    SkippedEntry,
    SkippedLine,
    derive_tags,
    generate_summary,
    infer_muscle_groups,
    normalize_exercise_name,
    normalize_for_lookup,
    parse_header_date,
    parse_journal,
    parse_journal_file,
    parse_set_line,
    parse_workout_entry,
)

SEPARATOR = "\n" + "_" * 30 + "\n"


def test_single_entry():
    result = parse_journal("Jan 5, 2025 (chest/back)\nBench Press\n* 90a x 10 x 3\n")

    assert len(result.workouts) == 1
    workout = result.workouts[0]
    assert workout.date == datetime(2025, 1, 5)
    assert workout.title == "chest/back"
    assert workout.tags == ["chest", "back"]
    assert not workout.is_symbolized

    [entry] = workout.exercises
    assert entry.exercise_name == "Bench Press"
    assert (entry.weight_value, entry.weight_type, entry.reps, entry.sets) == (90, "a", 10, 3)
    assert [e.name for e in result.exercises] == ["Bench Press"]


def test_bodyweight_set_has_no_weight():
    entry = parse_set_line("* bw x 12 x 1", "Push Up")
    assert isinstance(entry, ParsedExerciseEntry)
    assert entry.exercise_name == "Push Up"
    assert (entry.weight_type, entry.reps, entry.sets) == ("bw", 12, 1)
    assert entry.weight_value is None
    assert "weightValue" not in entry.model_dump(by_alias=True, exclude_none=True)


def test_entry_without_date_header_is_dropped():
    text = "Random thoughts about training\nBench Press\n* 90a x 10 x 3\n"
    result = parse_journal(text)

    assert result.workouts == []
    assert result.exercises == []
    assert result.skipped == [SkippedEntry(header="Random thoughts about training", reason="no date header")]


def test_header_must_be_within_first_five_lines():
    lines = ["note one", "note two", "note three", "note four", "note five", "Jan 5, 2025 (legs)", "Squat", "* 100a x 5 x 5"]
    assert isinstance(parse_workout_entry("\n".join(lines)), SkippedEntry)

    parsed = parse_workout_entry("\n".join(lines[4:]))
    assert parsed.date == datetime(2025, 1, 5)
    assert len(parsed.exercises) == 1


def test_unparseable_date_is_skipped():
    parsed = parse_workout_entry("Foo 5, 2025 (legs)\nSquat\n* 100a x 5 x 5")
    assert parsed == SkippedEntry(header="Foo 5, 2025 (legs)", reason="invalid date")


def test_segmentation_noise_and_ordering():
    text = SEPARATOR.join(
        [
            "Jan 9, 2025 (legs)\nSquat\n* 100a x 5 x 5",
            "  x  ",
            "Jan 2, 2025 (chest)\nBench Press\n* 80a x 8 x 3",
        ]
    )
    result = parse_journal(text)

    assert [w.date.day for w in result.workouts] == [2, 9]
    assert result.skipped == []


def test_short_underscore_runs_do_not_split():
    result = parse_journal("Jan 2, 2025 (chest)\nBench Press\n* 80a x 8 x 3\n_____\n* 85a x 6 x 2")
    assert len(result.workouts) == 1


def test_half_stack_weight():
    entry = parse_set_line("* 130 (/2) x 10 x 3", "Chest Press")
    assert entry.weight_value == 65.0
    assert entry.weight_type == "a"
    assert (entry.reps, entry.sets) == (10, 3)


def test_unilateral_each_hand():
    entry = parse_set_line("* 30e x 10 x LR x 3", "DB Row")
    assert entry.weight_type == "e"
    assert entry.is_unilateral
    assert (entry.weight_value, entry.reps, entry.sets) == (30, 10, 3)


def test_time_based_set():
    entry = parse_set_line("* bw x 45 sec", "Plank")
    assert (entry.weight_type, entry.reps, entry.sets) == ("bw", 45, 1)
    assert entry.notes == "Time-based exercise"

    noted = parse_set_line("* bw x 2 min Notes: on knees", "Plank")
    assert noted.reps == 2
    assert noted.notes == "on knees"


def test_timed_hold_with_sets_is_bodyweight():
    entry = parse_set_line("* bw x 30 sec hold x 2", "Wall Sit")
    assert (entry.weight_type, entry.reps, entry.sets) == ("bw", 30, 2)
    assert entry.notes == ""


def test_set_notes_are_extracted():
    entry = parse_set_line("* 20e x 12 x 3 Notes: slow negatives", "Incline DB Press")
    assert entry.notes == "slow negatives"
    assert (entry.weight_value, entry.weight_type, entry.reps, entry.sets) == (20, "e", 12, 3)

    entry = parse_set_line("* 20 x 12 x 3 note: grip failed", "Row")
    assert entry.notes == "grip failed"


def test_unrecognized_set_line_is_reported():
    assert parse_set_line("* felt great today", "Squat") == SkippedLine(
        line="* felt great today", reason="unrecognized set line"
    )


def test_set_before_any_exercise_name():
    entry = parse_set_line("* 10a x 10 x 1", None)
    assert entry.exercise_name == "Unknown Exercise"


def test_workout_body():
    entry = "\n".join(
        [
            "Jan 12, 2025 (shoulder/abs)",
            "Lateral Raise (cable)",
            "{",
            "* 10a x 15 x 3",
            "( -superset with",
            "Rear Delt Fly",
            "* 8e x 15 x 3",
            "}",
            ")",
            "Plank",
            "* bw x 60 sec",
            "* nonsense",
            "12 total sets",
            "Duration: 45 minutes",
            "Notes: short one",
        ]
    )
    workout = parse_workout_entry(entry)

    assert workout.tags == ["shoulders", "abs"]
    assert workout.duration == 45
    assert workout.notes == "short one"
    assert [e.exercise_name for e in workout.exercises] == ["Lateral Raise", "Rear Delt Fly", "Plank"]
    assert [e.order_index for e in workout.exercises] == [0, 1, 2]
    assert [s.reason for s in workout.skipped_lines] == ["unrecognized set line", "unrecognized line"]


def test_symbolized_entries_still_parse():
    workout = parse_workout_entry("Jan 9, 2025 (arms/abs)\nSymbolized this one\nCurl\n* 12e x 10 x 3")
    assert workout.is_symbolized
    assert len(workout.exercises) == 1


def test_january_2024_is_read_as_2025():
    assert parse_workout_entry("Jan 3, 2024 (legs)\nSquat\n* 100a x 5 x 5").date == datetime(2025, 1, 3)
    assert parse_workout_entry("Feb 3, 2024 (legs)\nSquat\n* 100a x 5 x 5").date == datetime(2024, 2, 3)


def test_header_with_missing_closing_paren():
    workout = parse_workout_entry("Jan 6, 2025 (legs\nSquat\n* 100a x 5 x 5")
    assert workout.title == "legs"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Jan 5, 2025", datetime(2025, 1, 5)),
        ("March 3, 2025", datetime(2025, 3, 3)),
        ("Sept 14,2025", datetime(2025, 9, 14)),
        ("Sep 14, 2025", datetime(2025, 9, 14)),
        ("Foo 1, 2025", None),
    ],
)
def test_parse_header_date(text, expected):
    assert parse_header_date(text) == expected


@pytest.mark.parametrize(
    "workout_type,tags",
    [
        ("chest/back", ["chest", "back"]),
        ("Shoulder/Abs", ["shoulders", "abs"]),
        ("Push, Pull", ["push", "pull"]),
        ("legs/", ["legs"]),
        ("", ["general"]),
        (" / ", ["general"]),
    ],
)
def test_derive_tags(workout_type, tags):
    assert derive_tags(workout_type) == tags


@pytest.mark.parametrize(
    "raw,name",
    [
        ("SL DB RDL", "Single Leg DB Romanian Deadlift"),
        ("DB RDL", "DB Romanian Deadlift"),
        ("RDL", "Romanian Deadlift"),
        ("Lat PD", "Lat Pulldown"),
        ("BSS", "Bulgarian Split Squat"),
        ("DL", "Deadlift"),
        ("Leg Ext", "Leg Extension"),
        ("HS curl", "Hamstring curl"),
        ("  Bench   Press ", "Bench Press"),
    ],
)
def test_normalize_exercise_name(raw, name):
    assert normalize_exercise_name(raw) == name


def test_normalize_for_lookup():
    assert normalize_for_lookup("SL Leg Ext") == "single leg leg extension"
    assert normalize_for_lookup("Lat pd") == "lat pulldown"
    assert normalize_for_lookup("SL calf raise") == "single leg calf raise"


def test_infer_muscle_groups():
    assert infer_muscle_groups("Bench Press") == ["chest", "triceps", "shoulders"]
    assert infer_muscle_groups("SL DB RDL") == ["back", "hamstrings", "glutes", "core", "balance"]
    assert infer_muscle_groups("Zottman Curl") == ["other"]


def test_extracted_exercises_are_deduplicated_by_normalized_name():
    text = SEPARATOR.join(
        [
            "Jan 2, 2025 (back)\nLat PD\n* 50a x 12 x 3",
            "Jan 4, 2025 (back)\nLat Pulldown\n* 55a x 10 x 3",
        ]
    )
    result = parse_journal(text)

    assert len(result.exercises) == 1
    assert result.exercises[0].name == "Lat Pulldown"
    assert result.exercises[0].muscle_groups == ["lats", "biceps"]
    assert result.exercises[0].category == "strength"


def test_summary(journal_file):
    parsed = parse_journal_file(journal_file)
    summary = generate_summary(parsed.workouts, parsed.exercises)

    assert summary.total_workouts == 3
    assert summary.symbolized_workouts == 1
    assert summary.actual_workouts == 2
    assert summary.unique_exercises == 5
    assert summary.total_exercise_entries == 5
    assert summary.workouts_by_month == {"2025-01": 3}
    assert summary.workouts_by_type == {"chest/back": 1, "legs": 1, "arms/abs": 1}
    assert summary.start_date == datetime(2025, 1, 5)
    assert summary.end_date == datetime(2025, 1, 9)


def test_journal_fixture_parses_cleanly(journal_file):
    result = parse_journal_file(journal_file)
    first = result.workouts[0]
    assert first.duration == 60
    assert first.notes == "good pump"
    assert [e.name for e in result.exercises] == ["Bench Press", "Lat Pulldown", "Squat", "Leg Extension", "Curl"]


def test_empty_summary():
    summary = generate_summary([], [])
    assert summary.total_workouts == 0
    assert summary.start_date is None


def test_invalid_bytes_do_not_stop_parsing(tmp_path):
    path = tmp_path / "journal.txt"
    path.write_bytes(b"Jan 5, 2025 (legs)\nSquat \xff\n* 100a x 5 x 5\n")

    result = parse_journal_file(path)
    [workout] = result.workouts
    assert workout.exercises[0].exercise_name == "Squat \ufffd"
    assert workout.exercises[0].sets == 5
