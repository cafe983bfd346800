"""Roomie data model for Allfreedo."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class Roomie(BaseModel):
    """Member profile, bound 1:1 to an authenticated user."""

    id: int = Field(..., description="Roomie identifier")
    name: str = Field(..., description="Display name")
    user_id: str = Field(..., description="Authenticated user this profile belongs to")
    avatar: Optional[str] = Field(None, description="Avatar URL")
    created_at: datetime = Field(..., description="Profile creation timestamp")
