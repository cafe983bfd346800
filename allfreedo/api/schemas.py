"""Request models for the Allfreedo API."""

from datetime import date
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from allfreedo.models.constants import DEFAULT_WEIGHT, MAX_RATING, MAX_WEIGHT, MIN_RATING, MIN_WEIGHT


class RoomieCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Display name")
    avatar: Optional[str] = Field(None, description="Avatar URL")


class RoomieUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    avatar: Optional[str] = None


class RoomCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Room name")
    description: str = Field("", description="Room description")


class RoomUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class JoinRoomRequest(BaseModel):
    access_code: str = Field(..., min_length=1, description="Room access code")


class TaskCreateRequest(BaseModel):
    """Request model for creating a one-off task in a room."""
    name: str = Field(..., min_length=1, description="Task name")
    description: str = Field("", description="Task description")
    weight: int = Field(DEFAULT_WEIGHT, ge=MIN_WEIGHT, le=MAX_WEIGHT, description="Importance (1-5)")
    assigned_roomie_id: Optional[int] = Field(None, description="Roomie responsible (must be a room member)")
    scheduled_date: Optional[date] = Field(None, description="Day the task is scheduled for")


class TaskUpdateRequest(BaseModel):
    """Request model for updating a task (all fields optional)."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    weight: Optional[int] = Field(None, ge=MIN_WEIGHT, le=MAX_WEIGHT)
    assigned_roomie_id: Optional[int] = None
    scheduled_date: Optional[date] = None


class TaskTemplateCreateRequest(BaseModel):
    """Request model for creating a task template.

    ``recurrence_rule`` uses the stored camelCase shape, e.g.
    ``{"frequency": "weekly", "interval": 1, "byDay": ["monday"]}``.
    """
    name: str = Field(..., min_length=1, description="Template name")
    description: str = Field("", description="Template description")
    weight: int = Field(DEFAULT_WEIGHT, ge=MIN_WEIGHT, le=MAX_WEIGHT, description="Importance (1-5)")
    recurring: bool = Field(False, description="Spawn tasks on a schedule")
    recurrence_rule: Optional[Dict[str, Any]] = Field(None, description="Recurrence rule (required when recurring)")


class TaskTemplateUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    weight: Optional[int] = Field(None, ge=MIN_WEIGHT, le=MAX_WEIGHT)
    recurring: Optional[bool] = None
    recurrence_rule: Optional[Dict[str, Any]] = None


class SpawnTaskRequest(BaseModel):
    scheduled_date: Optional[date] = Field(None, description="Day to schedule the task for (defaults to today)")


class RatingCreateRequest(BaseModel):
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING, description="Stars (1-5)")
    comment: Optional[str] = None


class RatingUpdateRequest(BaseModel):
    rating: Optional[int] = Field(None, ge=MIN_RATING, le=MAX_RATING)
    comment: Optional[str] = None
