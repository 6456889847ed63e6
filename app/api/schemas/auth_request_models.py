"""Request models for auth API endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class GoogleLoginRequest(BaseModel):
    """Request model for Google sign-in."""

    id_token: str = Field(
        ...,
        min_length=1,
        max_length=4096,
        description="ID token issued to the browser by Google Identity Services",
    )
