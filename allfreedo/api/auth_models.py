"""Request/response models for authentication endpoints."""

from pydantic import BaseModel, Field


class GoogleOAuthCallbackRequest(BaseModel):
    """Request model for Google sign-in callback."""
    id_token: str = Field(..., description="Google ID token from the sign-in flow")


class AuthResponse(BaseModel):
    """Response model for authentication."""
    access_token: str
    token_type: str = "bearer"
    user: dict
    has_profile: bool = Field(False, description="Whether the user already has a roomie profile")
