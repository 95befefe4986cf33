from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import Field
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..db import session_dependency
from ..models import User, Workout, to_naive_utc, utcnow
from .auth import TokenPayload, authenticate
from .entries import Document, ExerciseEntry, entry_to_document

router = APIRouter()


class WorkoutIn(Document):
    date: Optional[datetime] = None
    title: Optional[str] = Field(default=None, max_length=100)
    notes: str = Field(default="", max_length=1000)
    visibility: str = Field(default="private", pattern="^(private|shared)$")
    exercises: List[ExerciseEntry] = Field(default_factory=list)
    duration: Optional[int] = Field(default=None, ge=0)
    tags: List[str] = Field(default_factory=list)


def workout_to_dict(workout: Workout) -> Dict[str, Any]:
    return {
        "id": workout.id,
        "userId": workout.owner_id,
        "date": workout.date.isoformat(),
        "title": workout.title,
        "notes": workout.notes,
        "visibility": workout.visibility,
        "exercises": workout.exercises,
        "totalVolume": workout.total_volume,
        "duration": workout.duration,
        "tags": workout.tags,
        "createdAt": workout.created_at.isoformat(),
    }


@router.post("/workouts", status_code=201)
async def create_workout(
    body: WorkoutIn,
    user: TokenPayload = Depends(authenticate),
    session: AsyncSession = Depends(session_dependency),
) -> Dict[str, Any]:
    if not body.exercises:
        raise HTTPException(status_code=400, detail="At least one exercise is required")

    date = to_naive_utc(body.date) if body.date else utcnow()
    workout = Workout(
        owner_id=user.user_id,
        date=date,
        title=body.title,
        notes=body.notes,
        visibility=body.visibility,
        exercises=[entry_to_document(e) for e in body.exercises],
        duration=body.duration,
        tags=list(body.tags),
    )
    session.add(workout)

    db_user = await session.get(User, user.user_id)
    if db_user is not None:
        db_user.total_workouts += 1
        session.add(db_user)

    await session.commit()
    await session.refresh(workout)
    return {"message": "Workout created successfully", "workout": workout_to_dict(workout)}


@router.get("/workouts")
async def list_workouts(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user: TokenPayload = Depends(authenticate),
    session: AsyncSession = Depends(session_dependency),
) -> Dict[str, Any]:
    result = await session.exec(
        select(Workout)
        .where(Workout.owner_id == user.user_id)
        .order_by(Workout.date.desc(), Workout.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    workouts = result.all()

    count = await session.exec(select(func.count()).select_from(Workout).where(Workout.owner_id == user.user_id))
    total = count.one()

    return {
        "workouts": [workout_to_dict(w) for w in workouts],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit),
        },
    }
