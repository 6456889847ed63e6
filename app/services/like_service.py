"""Likes keyed on a signed-in user or an anonymous session id."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DomainError
from app.db.models.like import Like
from app.db.models.reading_record import ReadingRecord


class LikeError(DomainError):
    """Base error for like operations."""


class LikeRecordNotFoundError(LikeError):
    def __init__(self, message: str = "Reading record not found") -> None:
        super().__init__(message, "not_found")


class MissingLikerError(LikeError):
    def __init__(self, message: str = "Session ID is required") -> None:
        super().__init__(message, "session_required")


class LikeService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _ensure_record(self, record_id: int) -> None:
        result = await self._session.execute(
            select(ReadingRecord.id).where(ReadingRecord.id == record_id)
        )
        if result.scalar_one_or_none() is None:
            raise LikeRecordNotFoundError()

    @staticmethod
    def _liker(user_id: int | None, session_id: str | None) -> dict[str, int | str]:
        if user_id is not None:
            return {"user_id": user_id}
        if session_id:
            return {"session_id": session_id}
        raise MissingLikerError()

    async def add_like(
        self, record_id: int, user_id: int | None = None, session_id: str | None = None
    ) -> Like | None:
        """Like a record once. Returns ``None`` when the liker had already liked it."""
        liker = self._liker(user_id, session_id)
        await self._ensure_record(record_id)

        stmt = (
            insert(Like)
            .values(reading_record_id=record_id, **liker)
            .on_conflict_do_nothing()
            .returning(Like)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def remove_like(
        self, record_id: int, user_id: int | None = None, session_id: str | None = None
    ) -> Like | None:
        """Remove the liker's like; ``None`` when there was nothing to remove."""
        liker = self._liker(user_id, session_id)
        await self._ensure_record(record_id)

        stmt = delete(Like).where(Like.reading_record_id == record_id)
        if "user_id" in liker:
            stmt = stmt.where(Like.user_id == liker["user_id"])
        else:
            stmt = stmt.where(Like.session_id == liker["session_id"])
        result = await self._session.execute(stmt.returning(Like))
        return result.scalar_one_or_none()


def like_service_factory_provider() -> type[LikeService]:
    return LikeService
