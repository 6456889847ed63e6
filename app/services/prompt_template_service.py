"""Draft prompt templates: built-in defaults with per-user overrides."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.prompt_sanitizer import sanitize_template
from app.db.models.prompt_template import DraftMode, PromptTemplate
from app.llm.prompts import DEFAULT_TEMPLATES


@dataclass(frozen=True)
class EffectiveTemplate:
    mode: DraftMode
    template_text: str
    is_default: bool


class PromptTemplateService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _overrides(self, user_id: int) -> dict[str, str]:
        result = await self._session.execute(
            select(PromptTemplate.mode, PromptTemplate.template_text).where(
                PromptTemplate.user_id == user_id
            )
        )
        return {mode: text for mode, text in result.all()}

    async def list_templates(self, user_id: int) -> list[EffectiveTemplate]:
        overrides = await self._overrides(user_id)
        return [
            EffectiveTemplate(
                mode=mode,
                template_text=overrides.get(mode.value, DEFAULT_TEMPLATES[mode]),
                is_default=mode.value not in overrides,
            )
            for mode in DraftMode
        ]

    async def get_template(self, user_id: int, mode: DraftMode) -> EffectiveTemplate:
        overrides = await self._overrides(user_id)
        if mode.value in overrides:
            return EffectiveTemplate(mode=mode, template_text=overrides[mode.value], is_default=False)
        return EffectiveTemplate(mode=mode, template_text=DEFAULT_TEMPLATES[mode], is_default=True)

    async def save_template(
        self, user_id: int, mode: DraftMode, template_text: str
    ) -> EffectiveTemplate:
        """Sanitize and store an override.

        Raises:
            PromptValidationError: If the template is rejected by the sanitizer.
        """
        cleaned = sanitize_template(template_text)
        stmt = insert(PromptTemplate).values(user_id=user_id, mode=mode.value, template_text=cleaned)
        stmt = stmt.on_conflict_do_update(
            index_elements=[PromptTemplate.user_id, PromptTemplate.mode],
            set_={"template_text": cleaned, "updated_at": func.now()},
        )
        await self._session.execute(stmt)
        return EffectiveTemplate(mode=mode, template_text=cleaned, is_default=False)

    async def reset_template(self, user_id: int, mode: DraftMode) -> EffectiveTemplate:
        await self._session.execute(
            delete(PromptTemplate).where(
                PromptTemplate.user_id == user_id, PromptTemplate.mode == mode.value
            )
        )
        return EffectiveTemplate(mode=mode, template_text=DEFAULT_TEMPLATES[mode], is_default=True)


def prompt_template_service_factory_provider() -> type[PromptTemplateService]:
    return PromptTemplateService
