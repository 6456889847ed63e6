"""Response models for reading record and like endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.db.models.reading_record import ReadingRecord
from app.services.reading_record_service import RecordView


class ReadingRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int | None
    theme_id: int | None
    title: str
    link: str | None
    reading_amount: str
    learning: str
    action: str
    notes: str | None = None
    is_not_book: bool
    custom_link: str | None
    contains_spoiler: bool
    created_at: datetime
    updated_at: datetime
    like_count: int = 0
    is_liked: bool = False

    @classmethod
    def from_record(
        cls,
        record: ReadingRecord,
        *,
        like_count: int = 0,
        is_liked: bool = False,
        show_notes: bool = True,
    ) -> ReadingRecordResponse:
        response = cls.model_validate(record)
        return response.model_copy(
            update={
                "like_count": like_count,
                "is_liked": is_liked,
                "notes": record.notes if show_notes else None,
            }
        )

    @classmethod
    def from_view(cls, view: RecordView) -> ReadingRecordResponse:
        return cls.from_record(
            view.record,
            like_count=view.like_count,
            is_liked=view.is_liked,
            show_notes=view.show_notes,
        )


class TitleSuggestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    title: str
    link: str | None
    is_not_book: bool
    custom_link: str | None


class LikeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reading_record_id: int
    session_id: str | None
    user_id: int | None
    created_at: datetime
