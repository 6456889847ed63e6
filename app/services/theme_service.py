"""Writing themes: user-scoped labels that bucket records for drafts."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DomainError
from app.db.models.reading_record import ReadingRecord
from app.db.models.writing_theme import WritingTheme

MAX_THEME_NAME_LENGTH = 100


class ThemeError(DomainError):
    """Base error for theme operations."""


class ThemeNotFoundError(ThemeError):
    def __init__(self, message: str = "Theme not found") -> None:
        super().__init__(message, "not_found")


class ThemeExistsError(ThemeError):
    def __init__(self, message: str = "A theme with this name already exists") -> None:
        super().__init__(message, "theme_exists")


class InvalidThemeNameError(ThemeError):
    def __init__(
        self, message: str = f"Theme name must be 1 to {MAX_THEME_NAME_LENGTH} characters"
    ) -> None:
        super().__init__(message, "invalid_theme_name")


@dataclass(frozen=True)
class ThemeStat:
    theme_id: int | None
    theme_name: str | None
    total_records: int


def _normalize_name(theme_name: str) -> str:
    name = theme_name.strip()
    if not name or len(name) > MAX_THEME_NAME_LENGTH:
        raise InvalidThemeNameError()
    return name


def _is_unique_violation(error: IntegrityError) -> bool:
    # asyncpg reports unique violations as SQLSTATE 23505
    text = str(error.orig).lower()
    return "unique" in text or "duplicate" in text or "23505" in text


class ThemeService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_themes(self, user_id: int) -> list[WritingTheme]:
        result = await self._session.execute(
            select(WritingTheme)
            .where(WritingTheme.user_id == user_id)
            .order_by(WritingTheme.created_at, WritingTheme.id)
        )
        return list(result.scalars().all())

    async def get_theme(self, theme_id: int, user_id: int) -> WritingTheme:
        result = await self._session.execute(
            select(WritingTheme).where(
                WritingTheme.id == theme_id, WritingTheme.user_id == user_id
            )
        )
        theme = result.scalar_one_or_none()
        if theme is None:
            raise ThemeNotFoundError()
        return theme

    async def create_theme(self, user_id: int, theme_name: str) -> WritingTheme:
        """Create a theme.

        Raises:
            InvalidThemeNameError: If the trimmed name is empty or too long.
            ThemeExistsError: If the user already has a theme with this name.
        """
        name = _normalize_name(theme_name)
        try:
            # Savepoint keeps the request transaction usable after a duplicate.
            async with self._session.begin_nested():
                result = await self._session.execute(
                    insert(WritingTheme)
                    .values(user_id=user_id, theme_name=name)
                    .returning(WritingTheme)
                )
                return result.scalar_one()
        except IntegrityError as e:
            if _is_unique_violation(e):
                raise ThemeExistsError() from e
            raise

    async def rename_theme(self, theme_id: int, user_id: int, theme_name: str) -> WritingTheme:
        theme = await self.get_theme(theme_id, user_id)
        name = _normalize_name(theme_name)
        try:
            async with self._session.begin_nested():
                await self._session.execute(
                    update(WritingTheme)
                    .where(WritingTheme.id == theme.id)
                    .values(theme_name=name)
                )
        except IntegrityError as e:
            if _is_unique_violation(e):
                raise ThemeExistsError() from e
            raise
        await self._session.refresh(theme)
        return theme

    async def delete_theme(self, theme_id: int, user_id: int) -> WritingTheme:
        """Delete a theme; its records stay but lose the theme."""
        theme = await self.get_theme(theme_id, user_id)
        await self._session.execute(
            update(ReadingRecord).where(ReadingRecord.theme_id == theme.id).values(theme_id=None)
        )
        await self._session.execute(delete(WritingTheme).where(WritingTheme.id == theme.id))
        return theme

    async def count_theme_records(self, theme_id: int, user_id: int) -> int:
        result = await self._session.execute(
            select(func.count(ReadingRecord.id)).where(
                ReadingRecord.theme_id == theme_id, ReadingRecord.user_id == user_id
            )
        )
        return int(result.scalar_one())

    async def theme_stats(self, user_id: int) -> list[ThemeStat]:
        """Record counts per theme, plus an unthemed bucket when it is non-empty."""
        themed = await self._session.execute(
            select(
                WritingTheme.id,
                WritingTheme.theme_name,
                func.count(ReadingRecord.id),
            )
            .outerjoin(
                ReadingRecord,
                (ReadingRecord.theme_id == WritingTheme.id)
                & (ReadingRecord.user_id == user_id),
            )
            .where(WritingTheme.user_id == user_id)
            .group_by(WritingTheme.id, WritingTheme.theme_name)
            .order_by(WritingTheme.created_at, WritingTheme.id)
        )
        stats = [
            ThemeStat(theme_id=theme_id, theme_name=name, total_records=int(count))
            for theme_id, name, count in themed.all()
        ]

        unthemed = await self._session.execute(
            select(func.count(ReadingRecord.id)).where(
                ReadingRecord.user_id == user_id, ReadingRecord.theme_id.is_(None)
            )
        )
        unthemed_count = int(unthemed.scalar_one())
        if unthemed_count:
            stats.append(ThemeStat(theme_id=None, theme_name=None, total_records=unthemed_count))
        return stats


def theme_service_factory_provider() -> type[ThemeService]:
    return ThemeService
