"""Draft generation - turns a theme's records into publishable text."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DomainError
from app.core.share_text import format_for_all_platforms
from app.db.models.prompt_template import DraftMode
from app.db.models.reading_record import ReadingRecord
from app.llm import fallback
from app.llm.client import LLMClient, LLMServiceError
from app.llm.prompts import get_action_prompt, get_learning_prompt, render_draft_prompt
from app.llm.schemas import RecordAssistance
from app.services.prompt_template_service import PromptTemplateService
from app.services.settings_service import SettingsService
from app.services.theme_service import ThemeService

logger = logging.getLogger(__name__)


class DraftError(DomainError):
    """Base error for draft generation."""


class NotEnoughRecordsError(DraftError):
    def __init__(self, count: int, threshold: int) -> None:
        super().__init__(
            f"At least {threshold} records are needed for this theme (currently {count})",
            "not_enough_records",
            details={"count": count, "threshold": threshold},
        )


@dataclass(frozen=True)
class ThemeDraft:
    theme_id: int
    theme_name: str
    mode: DraftMode
    record_count: int
    content: str
    platforms: dict[str, str]
    is_fallback: bool


class DraftService:
    """Builds drafts with the configured LLM, or templated text when it is absent or failing."""

    def __init__(self, session: AsyncSession, llm_client: LLMClient | None) -> None:
        self._session = session
        self._llm_client = llm_client
        self._themes = ThemeService(session)
        self._settings = SettingsService(session)
        self._templates = PromptTemplateService(session)

    async def generate_theme_draft(self, user_id: int, theme_id: int, mode: DraftMode) -> ThemeDraft:
        """Generate a draft from the records filed under one of the user's themes.

        Raises:
            ThemeNotFoundError: If the theme does not belong to the user.
            NotEnoughRecordsError: If fewer records than the user's threshold exist.
        """
        theme = await self._themes.get_theme(theme_id, user_id)
        threshold = (await self._settings.get_settings(user_id)).draft_threshold
        count = await self._themes.count_theme_records(theme.id, user_id)
        if count < threshold:
            raise NotEnoughRecordsError(count, threshold)

        result = await self._session.execute(
            select(ReadingRecord)
            .where(ReadingRecord.theme_id == theme.id, ReadingRecord.user_id == user_id)
            .order_by(ReadingRecord.created_at, ReadingRecord.id)
        )
        records = list(result.scalars().all())

        template = await self._templates.get_template(user_id, mode)
        prompt = render_draft_prompt(template.template_text, theme.theme_name, records)

        content: str | None = None
        if self._llm_client is not None:
            try:
                content = await self._llm_client.complete(prompt, reasoning_effort="medium")
            except LLMServiceError as exc:
                logger.warning(f"Draft generation fell back to template. Error: {exc}")

        is_fallback = content is None
        if content is None:
            content = fallback.theme_draft(theme.theme_name, mode, records)

        return ThemeDraft(
            theme_id=theme.id,
            theme_name=theme.theme_name,
            mode=mode,
            record_count=len(records),
            content=content,
            platforms=format_for_all_platforms(content),
            is_fallback=is_fallback,
        )

    async def assist_record(
        self, title: str, learning: str, action: str | None = None
    ) -> RecordAssistance:
        """Organise one record's learning and, when given, expand its action into a plan."""
        action = action.strip() if action else None
        if self._llm_client is not None:
            try:
                insights = await self._llm_client.complete(
                    get_learning_prompt(title, learning), reasoning_effort="medium"
                )
                plan = None
                if action:
                    plan = await self._llm_client.complete(
                        get_action_prompt(title, learning, action), reasoning_effort="high"
                    )
                return RecordAssistance(learning_insights=insights, action_plan=plan)
            except LLMServiceError as exc:
                logger.warning(f"Record assistance fell back to template. Error: {exc}")

        return RecordAssistance(
            learning_insights=fallback.learning_insights(title, learning),
            action_plan=fallback.action_plan(action) if action else None,
            is_fallback=True,
        )


def draft_service_factory_provider(
    llm_client: LLMClient | None,
) -> Callable[[AsyncSession], DraftService]:
    def factory(session: AsyncSession) -> DraftService:
        return DraftService(session, llm_client)

    return factory
