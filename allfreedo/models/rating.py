"""Task rating data model for Allfreedo."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from allfreedo.models.constants import MAX_RATING, MIN_RATING


class TaskRating(BaseModel):
    """Star rating given by one roomie to one completed task."""

    id: int = Field(..., description="Rating identifier")
    task_id: int = Field(..., description="Rated task")
    roomie_id: int = Field(..., description="Roomie who gave the rating")
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING, description="Stars (1-5)")
    comment: Optional[str] = Field(None, description="Optional comment")
    created_at: datetime = Field(..., description="Rating creation timestamp")
