"""Gym journal parser.

The journal is a free-text diary. Entries are separated by a row of
underscores and start with a dated header::

    Jan 5, 2025 (chest/back)
    Bench Press
    * 90a x 10 x 3
    * 30e x 8 x LR x 2 Notes: slow negatives
    Push Up
    * bw x 12 x 1
    Duration: 55 minutes
    Notes: felt strong

A plain line names the current exercise; ``*`` lines are sets of it. Anything
that cannot be read is skipped and reported, never raised.
"""

from __future__ import annotations

import re
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Pattern, Sequence, Tuple, Union

from pydantic import Field

from .entries import Document, WeightType

ENTRY_SEPARATOR = re.compile(r"_{10,}")
MIN_ENTRY_LENGTH = 10
HEADER_SEARCH_LINES = 5

DATE_HEADER = re.compile(r"^([A-Z][a-z]{2,8}\s+\d{1,2},\s*\d{4})\s*\(([^)]*)\)?")
DURATION_LINE = re.compile(r"Duration:\s*(\d+)\s*minutes?", re.IGNORECASE)
SET_NOTES = re.compile(r"Notes?:\s*(.*)$", re.IGNORECASE)

BODYWEIGHT_SET = re.compile(
    r"^bw\s*x\s*(\d+)\s*(?:sec\s*(?:hold\s*)?)?x\s*(?:LR\s*x\s*)?(\d+)", re.IGNORECASE
)
WEIGHTED_SET = re.compile(
    r"^(\d+\.?\d*)\s*(?:\(/2\))?\s*(e|a)?\s*x\s*(\d+)\s*(?:sec\s*(?:hold\s*)?)?x\s*(?:LR\s*x\s*)?(\d+)",
    re.IGNORECASE,
)
TIMED_SET = re.compile(r"^bw\s*x\s*(\d+)\s*(?:sec|min)", re.IGNORECASE)

UNKNOWN_EXERCISE = "Unknown Exercise"
TIME_BASED_NOTE = "Time-based exercise"

# Ordered: compound abbreviations must expand before their parts
Rule = Tuple[Pattern[str], str]


def _rules(pairs: Sequence[Tuple[str, str]]) -> List[Rule]:
    return [(re.compile(pattern, re.IGNORECASE), replacement) for pattern, replacement in pairs]


CATALOG_NAME_RULES: List[Rule] = _rules([
    (r"\bSL\s+DB\s+RDL\b", "Single Leg DB Romanian Deadlift"),
    (r"\bDB\s+SL\s+RDL\b", "DB Single Leg Romanian Deadlift"),
    (r"\bSL\s+RDL\b", "Single Leg Romanian Deadlift"),
    (r"\bDB\s+RDL\b", "DB Romanian Deadlift"),
    (r"\bDB\s+BSS\b", "DB Bulgarian Split Squat"),
    (r"\bSL\s+DB\b", "Single Leg DB"),
    (r"^RDL$", "Romanian Deadlift"),
    (r"^DL$", "Deadlift"),
    (r"^BSS$", "Bulgarian Split Squat"),
    (r"\bBSS\b", "Bulgarian Split Squat"),
    (r"\bRDL\b", "Romanian Deadlift"),
    (r"\bLat\s+PD\b", "Lat Pulldown"),
    (r"\bLat\s+Pd\b", "Lat Pulldown"),
    (r"\bPD\b", "Pulldown"),
    (r"\bExt\b", "Extension"),
    (r"\bDL\b", "Deadlift"),
    (r"\bHS\b", "Hamstring"),
    (r"\bSL\b", "Single Leg"),
    (r"\bSH\b", "Single Hand"),
    (r"\bDB\b", "DB"),
])

# Used when matching set lines back to catalog names during import
LOOKUP_NAME_RULES: List[Rule] = _rules([
    (r"\bSL\s+DB\s+RDL\b", "Single Leg DB Romanian Deadlift"),
    (r"\bDB\s+SL\s+RDL\b", "DB Single Leg Romanian Deadlift"),
    (r"\bSL\s+RDL\b", "Single Leg Romanian Deadlift"),
    (r"\bDB\s+RDL\b", "DB Romanian Deadlift"),
    (r"\bDB\s+BSS\b", "DB Bulgarian Split Squat"),
    (r"\bSL\s+DB\b", "Single Leg DB"),
    (r"\bSL\s+Leg\s+Ext\b", "Single Leg Leg Extension"),
    (r"\bSL\s+calf\b", "Single Leg Calf"),
    (r"^RDL$", "Romanian Deadlift"),
    (r"^DL$", "Deadlift"),
    (r"^BSS$", "Bulgarian Split Squat"),
    (r"\bBSS\b", "Bulgarian Split Squat"),
    (r"\bRDL\b", "Romanian Deadlift"),
    (r"\bLat\s+PD\b", "Lat Pulldown"),
    (r"\bLat\s+[Pp]d\b", "Lat Pulldown"),
    (r"\bPD\b", "Pulldown"),
    (r"\bExt\b", "Extension"),
    (r"\bDL\b", "Deadlift"),
    (r"\bHS\b", "Hamstring"),
    (r"\bSL\b", "Single Leg"),
    (r"\bSH\b", "Single Hand"),
])

# Keyword (substring of the raw exercise name) -> muscle groups
MUSCLE_GROUP_KEYWORDS: Dict[str, List[str]] = {
    # Chest
    "chest press": ["chest", "triceps"],
    "bench press": ["chest", "triceps", "shoulders"],
    "db press": ["chest", "triceps"],
    "db bench": ["chest", "triceps"],
    "incline": ["chest", "shoulders"],
    "decline": ["chest"],
    "fly": ["chest"],
    "push up": ["chest", "triceps", "core"],
    "pushup": ["chest", "triceps", "core"],
    "serratus": ["serratus", "core"],
    "machine press": ["chest", "triceps"],
    # Back
    "deadlift": ["back", "hamstrings", "glutes", "core"],
    "dl": ["back", "hamstrings", "glutes", "core"],
    "rdl": ["hamstrings", "glutes", "back"],
    "sl rdl": ["hamstrings", "glutes", "balance"],
    "sl db rdl": ["hamstrings", "glutes", "balance"],
    "db rdl": ["hamstrings", "glutes", "back"],
    "row": ["back", "lats"],
    "seated row": ["back", "lats"],
    "lat pulldown": ["lats", "biceps"],
    "lat pd": ["lats", "biceps"],
    "pullover": ["lats", "chest"],
    "pull up": ["lats", "biceps", "back"],
    "pullup": ["lats", "biceps", "back"],
    "assisted pull": ["lats", "biceps"],
    # Shoulders
    "military press": ["shoulders", "triceps"],
    "overhead press": ["shoulders", "triceps"],
    "side delt": ["shoulders"],
    "lateral raise": ["shoulders"],
    "rear delt": ["rear delts", "shoulders"],
    "external rotation": ["rotator cuff", "shoulders"],
    "ext rot": ["rotator cuff", "shoulders"],
    "shrug": ["traps"],
    # Arms
    "bicep curl": ["biceps"],
    "viking curl": ["biceps"],
    "incline curl": ["biceps"],
    "hammer curl": ["biceps", "forearms"],
    "tricep ext": ["triceps"],
    "tricep push": ["triceps"],
    "tricep pull": ["triceps"],
    # Legs
    "squat": ["quadriceps", "glutes", "core"],
    "leg press": ["quadriceps", "glutes"],
    "leg ext": ["quadriceps"],
    "leg curl": ["hamstrings"],
    "hamstring curl": ["hamstrings"],
    "hs curl": ["hamstrings"],
    "bss": ["quadriceps", "glutes", "balance"],
    "split squat": ["quadriceps", "glutes"],
    "lunge": ["quadriceps", "glutes"],
    "calf": ["calves"],
    "adduct": ["adductors"],
    "abduct": ["abductors", "glutes"],
    # Core
    "plank": ["core", "abs"],
    "crunch": ["abs"],
    "leg raise": ["abs", "hip flexors"],
    "twist": ["obliques", "abs"],
    "russian": ["obliques", "abs"],
    "woodchop": ["obliques", "core"],
    "lumberjack": ["obliques", "core"],
    "deadbug": ["core", "abs"],
    "side bend": ["obliques"],
    # Stability
    "kettle": ["shoulders", "core", "stability"],
    "stability": ["core", "stability"],
}

WORKOUT_TYPE_TAGS: Dict[str, List[str]] = {
    "chest/back": ["chest", "back"],
    "back/chest": ["back", "chest"],
    "legs": ["legs"],
    "arms/abs": ["arms", "abs"],
    "shoulder/abs": ["shoulders", "abs"],
    "back/chest/abs": ["back", "chest", "abs"],
}


class ParsedExerciseEntry(Document):
    exercise_name: str
    weight_value: Optional[float] = None
    weight_type: WeightType
    reps: int
    sets: int
    notes: str = ""
    is_unilateral: bool = False
    order_index: int = 0


class SkippedLine(Document):
    line: str
    reason: str


class ParsedWorkout(Document):
    date: datetime
    title: str
    notes: str = ""
    exercises: List[ParsedExerciseEntry] = Field(default_factory=list)
    duration: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
    is_symbolized: bool = False
    skipped_lines: List[SkippedLine] = Field(default_factory=list)


class SkippedEntry(Document):
    header: str  # first line of the entry
    reason: str


class ExtractedExercise(Document):
    name: str
    muscle_groups: List[str]
    category: str = "strength"


class JournalParseResult(Document):
    workouts: List[ParsedWorkout] = Field(default_factory=list)
    exercises: List[ExtractedExercise] = Field(default_factory=list)
    skipped: List[SkippedEntry] = Field(default_factory=list)


class JournalSummary(Document):
    total_workouts: int
    symbolized_workouts: int
    actual_workouts: int
    unique_exercises: int
    total_exercise_entries: int
    workouts_by_month: Dict[str, int]
    workouts_by_type: Dict[str, int]
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


def parse_journal_file(path: Union[str, Path]) -> JournalParseResult:
    # Stray bytes in the diary become U+FFFD instead of failing the import
    return parse_journal(Path(path).read_text(encoding="utf-8", errors="replace"))


def parse_journal(raw_text: str) -> JournalParseResult:
    result = JournalParseResult()
    extracted: Dict[str, ExtractedExercise] = {}

    for segment in ENTRY_SEPARATOR.split(raw_text):
        entry = segment.strip()
        if len(entry) < MIN_ENTRY_LENGTH:
            continue

        parsed = parse_workout_entry(entry)
        if isinstance(parsed, SkippedEntry):
            result.skipped.append(parsed)
            continue

        result.workouts.append(parsed)
        for ex in parsed.exercises:
            name = normalize_exercise_name(ex.exercise_name)
            if name not in extracted:
                extracted[name] = ExtractedExercise(
                    name=name,
                    muscle_groups=infer_muscle_groups(ex.exercise_name),
                )

    result.workouts.sort(key=lambda w: w.date)
    result.exercises = list(extracted.values())
    return result


def parse_workout_entry(entry: str) -> Union[ParsedWorkout, SkippedEntry]:
    lines = [line.strip() for line in entry.split("\n")]
    lines = [line for line in lines if line]

    header_index = -1
    match = None
    for i, line in enumerate(lines[:HEADER_SEARCH_LINES]):
        match = DATE_HEADER.match(line)
        if match:
            header_index = i
            break
    if match is None:
        return SkippedEntry(header=lines[0] if lines else "", reason="no date header")

    date_text = match.group(1)
    workout_type = match.group(2) or ""
    # Known diary typo: January entries stamped with the previous year
    if "2024" in date_text and "Jan" in date_text:
        date_text = date_text.replace("2024", "2025")
    date = parse_header_date(date_text)
    if date is None:
        return SkippedEntry(header=lines[header_index], reason="invalid date")

    workout = ParsedWorkout(
        date=date,
        title=workout_type,
        tags=derive_tags(workout_type),
        is_symbolized=any("symbolize" in line.lower() for line in lines),
    )

    current_exercise: Optional[str] = None
    order_index = 0

    for line in lines[header_index + 1:]:
        if line in ("{", "}", ")") or line.startswith("( -supers"):
            continue

        duration = DURATION_LINE.search(line)
        if duration:
            workout.duration = int(duration.group(1))
            continue

        if line.lower().startswith("notes:"):
            workout.notes = line[len("notes:"):].strip()
            continue

        if not line.startswith("*"):
            if _looks_like_exercise_name(line):
                current_exercise = re.sub(r"\s*\(.*\)\s*$", "", line).strip()
            else:
                workout.skipped_lines.append(SkippedLine(line=line, reason="unrecognized line"))
            continue

        parsed = parse_set_line(line, current_exercise)
        if isinstance(parsed, SkippedLine):
            workout.skipped_lines.append(parsed)
            continue
        parsed.order_index = order_index
        order_index += 1
        workout.exercises.append(parsed)

    return workout


def _looks_like_exercise_name(line: str) -> bool:
    if len(line) < 2 or re.match(r"^\d", line):
        return False
    return re.match(r"^[\s\d{}()\[\]]+$", line) is None


def parse_header_date(text: str) -> Optional[datetime]:
    """Read ``Jan 5, 2025`` / ``January 5,2025`` style dates."""
    month, rest = text.split(None, 1)
    if month.lower() == "sept":
        month = "Sep"
    day, year = (part.strip() for part in rest.split(",", 1))
    for fmt in ("%b %d %Y", "%B %d %Y"):
        try:
            return datetime.strptime(f"{month} {day} {year}", fmt)
        except ValueError:
            continue
    return None


def parse_set_line(line: str, exercise_name: Optional[str]) -> Union[ParsedExerciseEntry, SkippedLine]:
    """Parse ``* 90a x 10 x 3``, ``* bw x 12 x 3`` or ``* bw x 45 sec``."""
    content = re.sub(r"^\*\s*", "", line).strip()

    notes = ""
    notes_match = SET_NOTES.search(content)
    if notes_match:
        notes = notes_match.group(1).strip()
        content = content[:notes_match.start()].strip()

    name = exercise_name or UNKNOWN_EXERCISE
    unilateral = " lr " in content.lower()

    bodyweight = BODYWEIGHT_SET.match(content)
    if bodyweight:
        return ParsedExerciseEntry(
            exercise_name=name,
            weight_type="bw",
            reps=int(bodyweight.group(1)),
            sets=int(bodyweight.group(2)),
            notes=notes,
            is_unilateral=unilateral,
        )

    weighted = WEIGHTED_SET.match(content)
    if weighted:
        weight = float(weighted.group(1))
        # Machines that display half the stack
        if "(/2)" in content:
            weight = weight / 2
        return ParsedExerciseEntry(
            exercise_name=name,
            weight_value=weight,
            weight_type=(weighted.group(2) or "a").lower(),
            reps=int(weighted.group(3)),
            sets=int(weighted.group(4)),
            notes=notes,
            is_unilateral=unilateral,
        )

    timed = TIMED_SET.match(content)
    if timed:
        return ParsedExerciseEntry(
            exercise_name=name,
            weight_type="bw",
            reps=int(timed.group(1)),  # seconds or minutes held
            sets=1,
            notes=notes or TIME_BASED_NOTE,
            is_unilateral=unilateral,
        )

    return SkippedLine(line=line, reason="unrecognized set line")


def apply_rules(name: str, rules: Sequence[Rule]) -> str:
    for pattern, replacement in rules:
        name = pattern.sub(replacement, name)
    return name


def normalize_exercise_name(name: str) -> str:
    """Canonical catalog name with gym abbreviations expanded."""
    return apply_rules(re.sub(r"\s+", " ", name.strip()), CATALOG_NAME_RULES)


def normalize_for_lookup(name: str) -> str:
    return apply_rules(re.sub(r"\s+", " ", name.strip()), LOOKUP_NAME_RULES).lower()


def infer_muscle_groups(exercise_name: str) -> List[str]:
    lower_name = exercise_name.lower()
    groups: Dict[str, None] = {}
    for keyword, keyword_groups in MUSCLE_GROUP_KEYWORDS.items():
        if keyword in lower_name:
            groups.update(dict.fromkeys(keyword_groups))
    return list(groups) or ["other"]


def derive_tags(workout_type: str) -> List[str]:
    lower_type = workout_type.lower()
    if lower_type in WORKOUT_TYPE_TAGS:
        return list(WORKOUT_TYPE_TAGS[lower_type])
    tags = [t.strip() for t in re.split(r"[/,]", lower_type)]
    tags = [t for t in tags if t]
    return tags or ["general"]


def generate_summary(workouts: Sequence[ParsedWorkout], exercises: Sequence[ExtractedExercise]) -> JournalSummary:
    symbolized = sum(1 for w in workouts if w.is_symbolized)
    by_month = Counter(f"{w.date.year}-{w.date.month:02d}" for w in workouts)
    by_type = Counter(w.title or "unknown" for w in workouts)
    return JournalSummary(
        total_workouts=len(workouts),
        symbolized_workouts=symbolized,
        actual_workouts=len(workouts) - symbolized,
        unique_exercises=len(exercises),
        total_exercise_entries=sum(len(w.exercises) for w in workouts),
        workouts_by_month=dict(by_month),
        workouts_by_type=dict(by_type),
        start_date=workouts[0].date if workouts else None,
        end_date=workouts[-1].date if workouts else None,
    )
