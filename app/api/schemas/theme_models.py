"""Request and response models for writing themes, settings and prompt templates."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.db.models.prompt_template import DraftMode
from app.services.theme_service import MAX_THEME_NAME_LENGTH


class ThemeRequest(BaseModel):
    theme_name: str = Field(
        ...,
        min_length=1,
        description=(
            "Label used to group records for drafts, "
            f"at most {MAX_THEME_NAME_LENGTH} characters once trimmed"
        ),
        examples=["習慣化"],
    )


class ThemeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    theme_name: str
    created_at: datetime
    updated_at: datetime


class ThemeStatResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    theme_id: int | None
    theme_name: str | None
    total_records: int


class UserSettingsRequest(BaseModel):
    hide_spoilers: bool | None = None
    draft_threshold: int | None = Field(default=None, ge=1, le=100)


class UserSettingsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    hide_spoilers: bool
    draft_threshold: int


class PromptTemplateRequest(BaseModel):
    mode: DraftMode
    template_text: str = Field(..., min_length=1)


class PromptTemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    mode: DraftMode
    template_text: str
    is_default: bool
