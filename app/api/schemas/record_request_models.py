"""Request models for reading record and like endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.db.models.reading_record import ReadingAmount

MAX_TITLE_LENGTH = 500
MAX_LINK_LENGTH = 2048
MAX_TEXT_LENGTH = 5000


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ReadingRecordCreateRequest(BaseModel):
    """Request model for posting a reading record."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "title": "7つの習慣",
                    "reading_amount": "1章",
                    "learning": "主体的であることは反応を選ぶこと",
                    "action": "明日の会議で最初に発言する",
                    "link": "https://www.amazon.co.jp/dp/4863940246",
                }
            ]
        }
    )

    title: str = Field(..., max_length=MAX_TITLE_LENGTH)
    reading_amount: ReadingAmount
    learning: str = Field(..., max_length=MAX_TEXT_LENGTH)
    action: str = Field(..., max_length=MAX_TEXT_LENGTH)
    link: str | None = Field(default=None, max_length=MAX_LINK_LENGTH)
    notes: str | None = Field(default=None, max_length=MAX_TEXT_LENGTH)
    is_not_book: bool = False
    custom_link: str | None = Field(default=None, max_length=MAX_LINK_LENGTH)
    contains_spoiler: bool = False
    theme_id: int | None = None

    @field_validator("title", "learning", "action")
    @classmethod
    def require_text(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("must not be blank")
        return cleaned

    @field_validator("link", "notes", "custom_link", mode="before")
    @classmethod
    def blank_optional(cls, value: Any) -> Any:
        return _blank_to_none(value)


class ReadingRecordUpdateRequest(BaseModel):
    """Partial update. Blank required fields are ignored rather than rejected."""

    title: str | None = Field(default=None, max_length=MAX_TITLE_LENGTH)
    reading_amount: ReadingAmount | None = None
    learning: str | None = Field(default=None, max_length=MAX_TEXT_LENGTH)
    action: str | None = Field(default=None, max_length=MAX_TEXT_LENGTH)
    link: str | None = Field(default=None, max_length=MAX_LINK_LENGTH)
    notes: str | None = Field(default=None, max_length=MAX_TEXT_LENGTH)
    is_not_book: bool | None = None
    custom_link: str | None = Field(default=None, max_length=MAX_LINK_LENGTH)
    contains_spoiler: bool | None = None
    theme_id: int | None = None

    @field_validator(
        "title", "reading_amount", "learning", "action", "link", "notes", "custom_link",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        return value.strip() if isinstance(value, str) else value

    def changes(self) -> dict[str, Any]:
        """Fields the client actually sent, with booleans left out when null."""
        sent = self.model_dump(mode="json", exclude_unset=True)
        for flag in ("is_not_book", "contains_spoiler"):
            if sent.get(flag) is None:
                sent.pop(flag, None)
        return sent


class LikeRequest(BaseModel):
    """Anonymous viewers identify themselves with the id from ``POST /api/session``."""

    session_id: str | None = Field(default=None, max_length=128)
