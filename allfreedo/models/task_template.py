"""Task template data model for Allfreedo."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from allfreedo.models.constants import DEFAULT_WEIGHT, MAX_WEIGHT, MIN_WEIGHT
from allfreedo.models.recurrence import RecurrenceRule


class TaskTemplate(BaseModel):
    """Reusable chore definition from which tasks are spawned."""

    id: Optional[int] = Field(None, description="Template identifier (assigned by the database)")
    room_id: int = Field(..., description="Room this template belongs to")
    name: str = Field(..., description="Template name")
    description: str = Field("", description="Template description")
    weight: int = Field(DEFAULT_WEIGHT, ge=MIN_WEIGHT, le=MAX_WEIGHT, description="Importance (1-5)")
    recurring: bool = Field(False, description="Whether the template spawns tasks on a schedule")
    recurrence_rule: Optional[str] = Field(
        None, description="Serialized RecurrenceRule (opaque JSON text)"
    )
    created_at: datetime = Field(..., description="Template creation timestamp")
    created_by: Optional[int] = Field(None, description="Roomie who created the template")
    last_assigned_roomie_id: Optional[int] = Field(
        None, description="Roomie who received the most recent spawned task (round-robin marker)"
    )

    def parsed_rule(self) -> Optional[RecurrenceRule]:
        """Structured rule, or None when absent or unparseable."""
        from allfreedo.recurrence.serialization import parse_rule

        if not self.recurrence_rule:
            return None
        return parse_rule(self.recurrence_rule)
