from __future__ import annotations

from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


WeightType = Literal["e", "a", "bw"]  # each hand, actual/total, bodyweight
Category = Literal["strength", "cardio", "flexibility", "other"]

NON_STRENGTH_CATEGORIES = ("cardio", "flexibility", "other")

# Defaults shown for entries logged before per-set entries existed
DEFAULT_CARDIO_MINUTES = 30
DEFAULT_CARDIO_ZONE = 2


class Document(BaseModel):
    """Embedded document stored as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class SetEntry(Document):
    # Strength
    weight_value: Optional[float] = None
    weight_type: Optional[WeightType] = None
    reps: Optional[int] = None
    sets: Optional[int] = None
    # Cardio
    duration: Optional[float] = None  # minutes
    intensity_zone: Optional[int] = Field(default=None, ge=1, le=4)


class ExerciseEntry(Document):
    exercise_id: str
    exercise_name: str
    category: Optional[Category] = None
    # Legacy single-line fields, superseded by set_entries when present
    weight_value: Optional[float] = None
    weight_type: Optional[WeightType] = None
    reps: Optional[int] = None
    sets: Optional[int] = None
    set_entries: Optional[List[SetEntry]] = None
    notes: str = ""
    order_index: int = 0


EntryLike = Union[ExerciseEntry, Mapping[str, Any]]


def is_strength(entry: ExerciseEntry) -> bool:
    return entry.category is None or entry.category == "strength"


def entry_from_document(doc: EntryLike) -> ExerciseEntry:
    """Read a stored exercise entry in either the legacy or the set-entry shape."""
    if isinstance(doc, ExerciseEntry):
        return doc
    return ExerciseEntry.model_validate(doc)


def get_set_entries(entry: ExerciseEntry) -> List[SetEntry]:
    """Resolve set entries, falling back to the legacy single-line fields."""
    if entry.set_entries:
        return list(entry.set_entries)
    if entry.category == "cardio":
        return [SetEntry(duration=DEFAULT_CARDIO_MINUTES, intensity_zone=DEFAULT_CARDIO_ZONE)]
    if entry.category == "flexibility":
        return [SetEntry(duration=DEFAULT_CARDIO_MINUTES)]
    if entry.category == "other":
        return []
    return [
        SetEntry(
            weight_value=entry.weight_value,
            weight_type=entry.weight_type or "a",
            reps=entry.reps or 1,
            sets=entry.sets or 1,
        )
    ]


def normalize_exercise_for_save(entry: ExerciseEntry) -> ExerciseEntry:
    """Canonical stored form.

    Strength entries keep the legacy fields mirrored from the first set entry so
    older readers still see a single-line summary.
    """
    entries = get_set_entries(entry)
    if entry.category in NON_STRENGTH_CATEGORIES:
        return entry.model_copy(update={"set_entries": entries or None})

    first = entries[0] if entries else SetEntry()
    return entry.model_copy(
        update={
            "weight_value": first.weight_value,
            "weight_type": first.weight_type,
            "reps": first.reps,
            "sets": first.sets,
            "set_entries": entries,
        }
    )


def entry_to_document(entry: EntryLike) -> Dict[str, Any]:
    return normalize_exercise_for_save(entry_from_document(entry)).model_dump(
        by_alias=True, exclude_none=True
    )


def compute_total_volume(exercises: Iterable[EntryLike]) -> float:
    """Sum of weight x reps x sets over strength set entries.

    Bodyweight sets weigh nothing; each-hand weights count twice.
    """
    total = 0.0
    for raw in exercises:
        entry = entry_from_document(raw)
        if not is_strength(entry):
            continue
        for s in get_set_entries(entry):
            weight = 0.0 if s.weight_type == "bw" else (s.weight_value or 0.0)
            multiplier = 2 if s.weight_type == "e" else 1
            total += weight * multiplier * (s.reps or 0) * (s.sets or 1)
    return total
