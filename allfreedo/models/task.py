"""Task data model for Allfreedo."""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field

from allfreedo.models.constants import DEFAULT_WEIGHT, MAX_WEIGHT, MIN_WEIGHT


class Task(BaseModel):
    """A concrete unit of work in a room.

    Lifecycle: created (manually or from a template) -> active -> done. A done task
    is terminal (it is never marked undone) but can still be rated or deleted.
    """
    
    id: Optional[int] = Field(None, description="Task identifier (assigned by the database)")
    room_id: int = Field(..., description="Room this task belongs to")
    name: str = Field(..., description="Task name")
    description: str = Field("", description="Task description")
    weight: int = Field(DEFAULT_WEIGHT, ge=MIN_WEIGHT, le=MAX_WEIGHT, description="Importance (1-5)")
    assigned_roomie_id: Optional[int] = Field(None, description="Roomie responsible for the task")
    scheduled_date: Optional[date] = Field(None, description="Calendar day the task is scheduled for")
    is_done: bool = Field(False, description="Whether the task has been completed")
    done_date: Optional[datetime] = Field(None, description="Completion timestamp")
    done_by: Optional[int] = Field(None, description="Roomie who marked the task done")
    task_template_id: Optional[int] = Field(None, description="Template the task was spawned from, if any")
    created_at: datetime = Field(..., description="Task creation timestamp")
