"""Granular muscle-group tags rolled up into parent body parts.

Arms collect biceps, triceps and forearms; legs collect quadriceps, hamstrings,
glutes, calves and the generic ``legs`` tag; core collects abs, obliques and
``core``. Chest, back and shoulders map to themselves, cardio and mobility are
their own parents.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Tuple

MUSCLE_GROUP_TO_PARENT: Dict[str, str] = {
    "chest": "chest",
    "back": "back",
    "shoulders": "shoulders",
    "biceps": "arms",
    "triceps": "arms",
    "forearms": "arms",
    "legs": "legs",
    "quadriceps": "legs",
    "hamstrings": "legs",
    "glutes": "legs",
    "calves": "legs",
    "core": "core",
    "abs": "core",
    "obliques": "core",
    "cardio": "cardio",
    "full body": "mobility",
    "mobility": "mobility",
}

# Display order of the volume summary
PARENT_BODY_PARTS_ORDER: Tuple[str, ...] = (
    "chest",
    "back",
    "shoulders",
    "arms",
    "legs",
    "core",
    "cardio",
    "mobility",
)

# Parents measured in minutes instead of sets
MINUTE_BODY_PARTS: FrozenSet[str] = frozenset({"cardio", "mobility"})


def get_parent_body_part(muscle_group: str) -> str:
    """Resolve a granular muscle group to its parent. Unknown groups pass through."""
    return MUSCLE_GROUP_TO_PARENT.get(muscle_group.lower(), muscle_group)
