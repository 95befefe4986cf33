from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, event
from sqlmodel import SQLModel, Field

from .services.entries import compute_total_volume


def new_id() -> str:
    return uuid4().hex


def utcnow() -> datetime:
    # Stored datetimes are naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class User(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    email: str = Field(index=True, unique=True)
    username: str
    display_name: Optional[str] = None
    total_workouts: int = 0


class Exercise(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(index=True)
    muscle_groups: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    category: str = "strength"  # strength | cardio | flexibility | other
    is_custom: bool = False
    owner_id: Optional[str] = Field(default=None, foreign_key="user.id")
    description: str = ""


class Workout(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    owner_id: str = Field(foreign_key="user.id", index=True)
    # Plain DateTime columns: values are naive UTC
    date: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(), index=True, nullable=False))
    title: Optional[str] = None
    notes: str = ""
    visibility: str = "private"  # private | shared
    # Embedded ExerciseEntry documents, see services.entries
    exercises: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    total_volume: float = 0.0
    duration: Optional[int] = None
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(), nullable=False))


@event.listens_for(Workout, "before_insert")
@event.listens_for(Workout, "before_update")
def _recompute_total_volume(mapper, connection, target: Workout) -> None:
    target.total_volume = compute_total_volume(target.exercises or [])


@event.listens_for(Exercise, "before_insert")
@event.listens_for(Exercise, "before_update")
def _check_custom_owner(mapper, connection, target: Exercise) -> None:
    if target.is_custom and not target.owner_id:
        raise ValueError(f"custom exercise {target.name!r} requires an owner")
