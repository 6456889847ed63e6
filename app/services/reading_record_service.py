"""Reading records: posting, the public timeline, and owner-only edits."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement, delete, exists, func, insert, literal, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DomainError
from app.db.models.like import Like
from app.db.models.reading_record import ReadingRecord
from app.db.models.user_settings import UserSettings
from app.db.models.writing_theme import WritingTheme
from app.services.amazon_service import AmazonLinkService

SEARCH_LIMIT_DEFAULT = 10
SEARCH_LIMIT_MAX = 50

# Required text fields: a blank value in an update means "leave unchanged".
_REQUIRED_FIELDS = ("title", "reading_amount", "learning", "action")
_OPTIONAL_FIELDS = ("notes", "custom_link", "is_not_book", "contains_spoiler", "theme_id")


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ReadingRecordError(DomainError):
    """Base error for reading record operations."""


class RecordNotFoundError(ReadingRecordError):
    def __init__(self, message: str = "Reading record not found") -> None:
        super().__init__(message, "not_found")


class RecordForbiddenError(ReadingRecordError):
    def __init__(self, message: str = "You can only modify your own reading records") -> None:
        super().__init__(message, "forbidden")


class InvalidThemeError(ReadingRecordError):
    def __init__(self, message: str = "Theme not found for this user") -> None:
        super().__init__(message, "invalid_theme")


@dataclass(frozen=True)
class RecordView:
    """A record as one viewer sees it."""

    record: ReadingRecord
    like_count: int
    is_liked: bool
    show_notes: bool


@dataclass(frozen=True)
class TitleSuggestion:
    title: str
    link: str | None
    is_not_book: bool
    custom_link: str | None


class ReadingRecordService:
    def __init__(self, session: AsyncSession, amazon: AmazonLinkService) -> None:
        self._session = session
        self._amazon = amazon

    def _liked_by(self, user_id: int | None, session_id: str | None) -> ColumnElement[bool]:
        if user_id is not None:
            condition = Like.user_id == user_id
        elif session_id:
            condition = Like.session_id == session_id
        else:
            return literal(False)
        return exists().where(Like.reading_record_id == ReadingRecord.id, condition)

    def _view_query(self, user_id: int | None, session_id: str | None) -> Any:
        like_count = (
            select(func.count(Like.id))
            .where(Like.reading_record_id == ReadingRecord.id)
            .correlate(ReadingRecord)
            .scalar_subquery()
        )
        return select(
            ReadingRecord,
            like_count.label("like_count"),
            self._liked_by(user_id, session_id).label("is_liked"),
        )

    @staticmethod
    def _to_views(rows: Sequence[Any], viewer_id: int | None) -> list[RecordView]:
        return [
            RecordView(
                record=record,
                like_count=int(like_count or 0),
                is_liked=bool(is_liked),
                show_notes=viewer_id is not None and record.user_id == viewer_id,
            )
            for record, like_count, is_liked in rows
        ]

    async def _hides_spoilers(self, user_id: int) -> bool:
        result = await self._session.execute(
            select(UserSettings.hide_spoilers).where(UserSettings.user_id == user_id)
        )
        return bool(result.scalar_one_or_none())

    async def _ensure_theme_owner(self, theme_id: int | None, user_id: int | None) -> None:
        if theme_id is None:
            return
        if user_id is None:
            raise InvalidThemeError("Themes are only available to signed-in users")
        result = await self._session.execute(
            select(WritingTheme.id).where(
                WritingTheme.id == theme_id, WritingTheme.user_id == user_id
            )
        )
        if result.scalar_one_or_none() is None:
            raise InvalidThemeError()

    async def _get_owned(self, record_id: int, user_id: int) -> ReadingRecord:
        record = await self._session.get(ReadingRecord, record_id)
        if record is None:
            raise RecordNotFoundError()
        if record.user_id != user_id:
            raise RecordForbiddenError()
        return record

    async def create_record(self, user_id: int | None, data: dict[str, Any]) -> ReadingRecord:
        """Store a new record; Amazon links become affiliate links.

        Raises:
            InvalidThemeError: If ``theme_id`` is not one of the caller's themes.
        """
        values = dict(data)
        await self._ensure_theme_owner(values.get("theme_id"), user_id)
        values["link"] = await self._amazon.convert_to_affiliate_link(values.get("link")) or None

        result = await self._session.execute(
            insert(ReadingRecord).values(user_id=user_id, **values).returning(ReadingRecord)
        )
        return result.scalar_one()

    async def list_timeline(
        self, viewer_id: int | None = None, session_id: str | None = None
    ) -> list[RecordView]:
        """All records, newest first, with like data for the viewer."""
        stmt = self._view_query(viewer_id, session_id)
        if viewer_id is not None and await self._hides_spoilers(viewer_id):
            stmt = stmt.where(ReadingRecord.contains_spoiler.is_(False))
        stmt = stmt.order_by(ReadingRecord.created_at.desc(), ReadingRecord.id.desc())
        result = await self._session.execute(stmt)
        return self._to_views(result.all(), viewer_id)

    async def list_user_records(
        self, user_id: int, session_id: str | None = None
    ) -> list[RecordView]:
        stmt = (
            self._view_query(user_id, session_id)
            .where(ReadingRecord.user_id == user_id)
            .order_by(ReadingRecord.created_at.desc(), ReadingRecord.id.desc())
        )
        result = await self._session.execute(stmt)
        return self._to_views(result.all(), user_id)

    async def get_record(
        self, record_id: int, viewer_id: int | None = None, session_id: str | None = None
    ) -> RecordView:
        stmt = self._view_query(viewer_id, session_id).where(ReadingRecord.id == record_id)
        result = await self._session.execute(stmt)
        views = self._to_views(result.all(), viewer_id)
        if not views:
            raise RecordNotFoundError()
        return views[0]

    async def update_record(
        self, record_id: int, user_id: int, changes: dict[str, Any]
    ) -> RecordView:
        """Apply a partial update from the record's owner.

        Blank required fields are ignored; a supplied link is converted again.

        Raises:
            RecordNotFoundError: If the record does not exist.
            RecordForbiddenError: If the caller does not own it.
        """
        record = await self._get_owned(record_id, user_id)

        values: dict[str, Any] = {}
        for field in _REQUIRED_FIELDS:
            value = changes.get(field)
            if value:
                values[field] = value
        for field in _OPTIONAL_FIELDS:
            if field in changes:
                values[field] = changes[field]
        if "link" in changes:
            link = changes["link"]
            values["link"] = await self._amazon.convert_to_affiliate_link(link) or None

        if "theme_id" in values:
            await self._ensure_theme_owner(values["theme_id"], user_id)

        if values:
            await self._session.execute(
                update(ReadingRecord).where(ReadingRecord.id == record.id).values(**values)
            )
            await self._session.refresh(record)
        return await self.get_record(record.id, viewer_id=user_id)

    async def delete_record(self, record_id: int, user_id: int) -> RecordView:
        """Delete an owned record and return it as it looked, likes included."""
        record = await self._get_owned(record_id, user_id)
        view = await self.get_record(record.id, viewer_id=user_id)
        await self._session.execute(delete(ReadingRecord).where(ReadingRecord.id == record.id))
        return view

    async def search_titles(
        self, query: str, limit: int = SEARCH_LIMIT_DEFAULT
    ) -> list[TitleSuggestion]:
        """Distinct titles matching ``query``, each with its most recent link."""
        pattern = f"%{_escape_like(query.strip())}%"
        latest = (
            select(
                ReadingRecord.title,
                ReadingRecord.link,
                ReadingRecord.is_not_book,
                ReadingRecord.custom_link,
            )
            .where(ReadingRecord.title.ilike(pattern, escape="\\"))
            .distinct(ReadingRecord.title)
            .order_by(ReadingRecord.title, ReadingRecord.created_at.desc())
            .limit(min(max(limit, 1), SEARCH_LIMIT_MAX))
        )
        result = await self._session.execute(latest)
        return [
            TitleSuggestion(
                title=row.title,
                link=row.link,
                is_not_book=row.is_not_book,
                custom_link=row.custom_link,
            )
            for row in result.all()
        ]


def reading_record_service_factory_provider(
    amazon: AmazonLinkService,
) -> Callable[[AsyncSession], ReadingRecordService]:
    def factory(session: AsyncSession) -> ReadingRecordService:
        return ReadingRecordService(session, amazon)

    return factory
