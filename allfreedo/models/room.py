"""Room data model for Allfreedo."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class Room(BaseModel):
    """A shared household with a unique access code for joining."""

    id: int = Field(..., description="Room identifier")
    name: str = Field(..., description="Room name")
    description: str = Field("", description="Room description")
    access_code: str = Field(..., description="Unique code other roomies use to join")
    created_at: datetime = Field(..., description="Room creation timestamp")
    created_by: Optional[int] = Field(None, description="Roomie who created the room")
