"""Request and response models for draft generation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from app.db.models.prompt_template import DraftMode


class ThemeDraftRequest(BaseModel):
    model_config = ConfigDict(json_schema_extra={"examples": [{"theme_id": 1, "mode": "essay"}]})

    theme_id: int
    mode: DraftMode = DraftMode.ESSAY


class ThemeDraftResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    theme_id: int
    theme_name: str
    mode: DraftMode
    record_count: int
    content: str
    platforms: dict[str, str] = Field(..., description="Renditions keyed by x, note and zenn")
    is_fallback: bool


class RecordAssistRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    learning: str = Field(..., min_length=1, max_length=5000)
    action: str | None = Field(default=None, max_length=5000)
