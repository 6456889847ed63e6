from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import DomainError
from app.db.models.user_settings import UserSettings

MIN_DRAFT_THRESHOLD = 1
MAX_DRAFT_THRESHOLD = 100


class InvalidSettingsValueError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, "invalid_settings")


@dataclass(frozen=True)
class EffectiveSettings:
    hide_spoilers: bool
    draft_threshold: int


class SettingsService:
    """Per-user preferences, falling back to defaults until first saved."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def defaults() -> EffectiveSettings:
        return EffectiveSettings(
            hide_spoilers=False, draft_threshold=settings.default_draft_threshold
        )

    async def get_settings(self, user_id: int) -> EffectiveSettings:
        result = await self._session.execute(
            select(UserSettings).where(UserSettings.user_id == user_id)
        )
        stored = result.scalar_one_or_none()
        if stored is None:
            return self.defaults()
        return EffectiveSettings(
            hide_spoilers=stored.hide_spoilers, draft_threshold=stored.draft_threshold
        )

    async def update_settings(
        self,
        user_id: int,
        *,
        hide_spoilers: bool | None = None,
        draft_threshold: int | None = None,
    ) -> EffectiveSettings:
        """Upsert the given fields; omitted ones keep their current value."""
        if draft_threshold is not None and not (
            MIN_DRAFT_THRESHOLD <= draft_threshold <= MAX_DRAFT_THRESHOLD
        ):
            raise InvalidSettingsValueError(
                f"draft_threshold must be between {MIN_DRAFT_THRESHOLD} and {MAX_DRAFT_THRESHOLD}"
            )

        current = await self.get_settings(user_id)
        values = {
            "hide_spoilers": current.hide_spoilers if hide_spoilers is None else hide_spoilers,
            "draft_threshold": (
                current.draft_threshold if draft_threshold is None else draft_threshold
            ),
        }
        stmt = insert(UserSettings).values(user_id=user_id, **values)
        stmt = stmt.on_conflict_do_update(index_elements=[UserSettings.user_id], set_=values)
        await self._session.execute(stmt)
        return EffectiveSettings(**values)


def settings_service_factory_provider() -> type[SettingsService]:
    return SettingsService
