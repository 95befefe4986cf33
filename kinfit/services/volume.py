from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from pydantic import ValidationError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..body_parts import MINUTE_BODY_PARTS, PARENT_BODY_PARTS_ORDER, get_parent_body_part
from ..db import session_dependency
from ..models import Exercise, Workout, to_naive_utc, utcnow
from ..settings import get_settings
from .auth import TokenPayload, authenticate
from .entries import ExerciseEntry, entry_from_document, is_strength

router = APIRouter()

WINDOW = timedelta(days=7)
DAY_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class VolumeTargets:
    sets_per_week: int = 10
    cardio_minutes: int = 150
    mobility_minutes: int = 60

    @classmethod
    def from_settings(cls) -> "VolumeTargets":
        settings = get_settings()
        return cls(
            sets_per_week=settings.target_sets_per_week,
            cardio_minutes=settings.target_minutes_cardio,
            mobility_minutes=settings.target_minutes_mobility,
        )

    def minutes_for(self, body_part: str) -> int:
        return self.cardio_minutes if body_part == "cardio" else self.mobility_minutes


@dataclass
class BodyPartVolume:
    name: str
    unit: str  # "sets" | "minutes"
    amount: float
    target: int
    days_since_last_trained: Optional[int]
    last_trained_date: Optional[datetime]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "unit": self.unit}
        if self.unit == "minutes":
            data["minutesThisWeek"] = self.amount
            data["targetMinutes"] = self.target
        else:
            data["setsThisWeek"] = self.amount
            data["targetSets"] = self.target
        data["daysSinceLastTrained"] = self.days_since_last_trained
        data["lastTrainedDate"] = (
            self.last_trained_date.isoformat(timespec="milliseconds") + "Z"
            if self.last_trained_date is not None
            else None
        )
        return data


@dataclass
class _Accumulator:
    sets: int = 0
    minutes: float = 0.0
    last_trained: Optional[datetime] = None


def count_sets(entry: ExerciseEntry) -> int:
    """Sets logged for one exercise entry.

    Strength entries sum the per-line set counts; any other category counts
    one set per line, whatever the line's own ``sets`` says.
    """
    if entry.set_entries:
        if is_strength(entry):
            return sum(s.sets or 1 for s in entry.set_entries)
        return len(entry.set_entries)
    return (entry.sets or 1) if is_strength(entry) else 1


def read_entry(raw: Any) -> Optional[ExerciseEntry]:
    """Lenient read for aggregation: only id, category and set counts matter here."""
    if isinstance(raw, ExerciseEntry):
        return raw
    try:
        return entry_from_document({"exerciseId": "", "exerciseName": "", **raw})
    except (TypeError, ValidationError):
        logger.warning(f"[kinfit] volume: skipping unreadable exercise document {raw!r}")
        return None


def count_minutes(entry: ExerciseEntry) -> float:
    if not entry.set_entries:
        return 0
    return sum(s.duration or 0 for s in entry.set_entries)


def summarize(
    workouts: Iterable[Workout],
    muscle_groups_by_exercise: Mapping[str, Sequence[str]],
    now: datetime,
    targets: Optional[VolumeTargets] = None,
) -> List[BodyPartVolume]:
    """Rolling 7-day volume per parent body part, one row per part in display order."""
    targets = targets or VolumeTargets()
    now = to_naive_utc(now)
    window_start = now - WINDOW
    by_part: Dict[str, _Accumulator] = {}

    for workout in workouts:
        date = to_naive_utc(workout.date)
        if date < window_start:
            continue
        for raw in workout.exercises or []:
            entry = read_entry(raw)
            if entry is None:
                continue
            groups = muscle_groups_by_exercise.get(entry.exercise_id) or []
            # legs + quadriceps both roll up to legs: count once per parent
            parents = list(dict.fromkeys(get_parent_body_part(g) for g in groups if g))
            for parent in parents:
                acc = by_part.setdefault(parent, _Accumulator())
                if parent in MINUTE_BODY_PARTS:
                    acc.minutes += count_minutes(entry)
                else:
                    acc.sets += count_sets(entry)
                if acc.last_trained is None or date > acc.last_trained:
                    acc.last_trained = date

    summary: List[BodyPartVolume] = []
    for name in PARENT_BODY_PARTS_ORDER:
        acc = by_part.get(name, _Accumulator())
        days_since = None
        if acc.last_trained is not None:
            days_since = math.floor((now - acc.last_trained).total_seconds() / DAY_SECONDS)
        if name in MINUTE_BODY_PARTS:
            summary.append(
                BodyPartVolume(name, "minutes", acc.minutes, targets.minutes_for(name), days_since, acc.last_trained)
            )
        else:
            summary.append(
                BodyPartVolume(name, "sets", acc.sets, targets.sets_per_week, days_since, acc.last_trained)
            )
    return summary


async def load_muscle_groups(session: AsyncSession, workouts: Iterable[Workout]) -> Dict[str, List[str]]:
    exercise_ids = {
        str(raw.get("exerciseId"))
        for w in workouts
        for raw in (w.exercises or [])
        if raw.get("exerciseId")
    }
    if not exercise_ids:
        return {}
    result = await session.exec(select(Exercise).where(Exercise.id.in_(exercise_ids)))
    return {ex.id: list(ex.muscle_groups or []) for ex in result.all()}


@router.get("/analytics/volume-summary")
async def volume_summary(
    user: TokenPayload = Depends(authenticate),
    session: AsyncSession = Depends(session_dependency),
) -> Dict[str, Any]:
    try:
        now = utcnow()
        result = await session.exec(
            select(Workout).where(Workout.owner_id == user.user_id, Workout.date >= now - WINDOW)
        )
        workouts = result.all()
        muscle_groups = await load_muscle_groups(session, workouts)
        targets = VolumeTargets.from_settings()
        body_parts = summarize(workouts, muscle_groups, now, targets)
    except Exception:
        logger.exception("Volume summary error")
        raise HTTPException(status_code=500, detail="Failed to fetch volume summary")
    return {
        "bodyParts": [bp.to_dict() for bp in body_parts],
        "targetSetsPerWeek": targets.sets_per_week,
    }
