"""Response models for auth API endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """Response model for user information."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None = None
    picture: str | None = None


class LoginResponse(BaseModel):
    """Bearer token issued after Google sign-in."""

    token: str
    token_type: str = "bearer"
    user: UserResponse


class SessionResponse(BaseModel):
    session_id: str
