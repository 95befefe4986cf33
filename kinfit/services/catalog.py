from __future__ import annotations

from typing import Dict, List, Optional

from loguru import logger
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Exercise

DEFAULT_EXERCISES: List[Dict] = [
    # Chest
    {"name": "Bench Press", "muscle_groups": ["chest", "triceps", "shoulders"], "category": "strength"},
    {"name": "Incline Bench Press", "muscle_groups": ["chest", "shoulders", "triceps"], "category": "strength"},
    {"name": "Dumbbell Flyes", "muscle_groups": ["chest"], "category": "strength"},
    {"name": "Push-ups", "muscle_groups": ["chest", "triceps", "core"], "category": "strength"},
    {"name": "Cable Crossover", "muscle_groups": ["chest"], "category": "strength"},
    # Back
    {"name": "Deadlift", "muscle_groups": ["back", "legs", "core"], "category": "strength"},
    {"name": "Pull-ups", "muscle_groups": ["back", "biceps"], "category": "strength"},
    {"name": "Barbell Row", "muscle_groups": ["back", "biceps"], "category": "strength"},
    {"name": "Lat Pulldown", "muscle_groups": ["back", "biceps"], "category": "strength"},
    {"name": "Dumbbell Row", "muscle_groups": ["back", "biceps"], "category": "strength"},
    {"name": "Seated Cable Row", "muscle_groups": ["back", "biceps"], "category": "strength"},
    # Shoulders
    {"name": "Overhead Press", "muscle_groups": ["shoulders", "triceps"], "category": "strength"},
    {"name": "Lateral Raises", "muscle_groups": ["shoulders"], "category": "strength"},
    {"name": "Front Raises", "muscle_groups": ["shoulders"], "category": "strength"},
    {"name": "Rear Delt Flyes", "muscle_groups": ["shoulders", "back"], "category": "strength"},
    {"name": "Arnold Press", "muscle_groups": ["shoulders", "triceps"], "category": "strength"},
    # Arms
    {"name": "Bicep Curls", "muscle_groups": ["biceps"], "category": "strength"},
    {"name": "Hammer Curls", "muscle_groups": ["biceps", "forearms"], "category": "strength"},
    {"name": "Tricep Dips", "muscle_groups": ["triceps", "chest"], "category": "strength"},
    {"name": "Tricep Pushdown", "muscle_groups": ["triceps"], "category": "strength"},
    {"name": "Skull Crushers", "muscle_groups": ["triceps"], "category": "strength"},
    # Legs
    {"name": "Squat", "muscle_groups": ["legs", "glutes", "core"], "category": "strength"},
    {"name": "Leg Press", "muscle_groups": ["legs", "glutes"], "category": "strength"},
    {"name": "Leg Curls", "muscle_groups": ["hamstrings"], "category": "strength"},
    {"name": "Leg Extensions", "muscle_groups": ["quadriceps"], "category": "strength"},
    {"name": "Lunges", "muscle_groups": ["legs", "glutes"], "category": "strength"},
    {"name": "Calf Raises", "muscle_groups": ["calves"], "category": "strength"},
    # Core
    {"name": "Plank", "muscle_groups": ["core", "abs"], "category": "strength"},
    {"name": "Crunches", "muscle_groups": ["abs"], "category": "strength"},
    {"name": "Russian Twists", "muscle_groups": ["abs", "obliques"], "category": "strength"},
    {"name": "Leg Raises", "muscle_groups": ["abs", "core"], "category": "strength"},
    # Cardio
    {"name": "Running", "muscle_groups": ["legs", "cardio"], "category": "cardio"},
    {"name": "Cycling", "muscle_groups": ["legs", "cardio"], "category": "cardio"},
    {"name": "Jump Rope", "muscle_groups": ["full body", "cardio"], "category": "cardio"},
    {"name": "Rowing", "muscle_groups": ["back", "legs", "cardio"], "category": "cardio"},
]


async def find_catalog_exercise(session: AsyncSession, name: str) -> Optional[Exercise]:
    """Non-custom catalog entry with the same name, ignoring case."""
    result = await session.exec(
        select(Exercise).where(
            func.lower(Exercise.name) == name.lower(),
            Exercise.is_custom == False,  # noqa: E712
        )
    )
    return result.first()


async def seed_default_exercises(session: AsyncSession) -> int:
    inserted = 0
    for data in DEFAULT_EXERCISES:
        if await find_catalog_exercise(session, data["name"]) is not None:
            continue
        session.add(Exercise(is_custom=False, **data))
        inserted += 1
    await session.commit()
    logger.info(f"[kinfit] catalog: inserted {inserted} default exercises ({len(DEFAULT_EXERCISES) - inserted} already present)")
    return inserted
