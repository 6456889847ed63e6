"""Unit of Work: one transaction per request, session-scoped services from registry."""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from typing import Any, cast

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_session_maker
from app.services.amazon_service import AmazonLinkService
from app.services.auth_service import AuthService
from app.services.catalog_service import CatalogService
from app.services.draft_service import DraftService
from app.services.like_service import LikeService
from app.services.meta_service import MetaService
from app.services.prompt_template_service import PromptTemplateService
from app.services.reading_record_service import ReadingRecordService
from app.services.settings_service import SettingsService
from app.services.theme_service import ThemeService
from app.services.wishlist_service import WishlistService


class UnitOfWork:
    """Holds the request's session and exposes session-scoped services from the registry.

    Registry entries are either factories taking the session or ready-made
    instances shared across requests. Each service is resolved at most once.
    """

    def __init__(self, session: AsyncSession, services: Mapping[str, Any]) -> None:
        self._session = session
        self._services = services
        self._resolved: dict[str, Any] = {}

    def _resolve(self, key: str) -> Any:
        if key not in self._resolved:
            service = self._services[key]
            self._resolved[key] = service(self._session) if callable(service) else service
        return self._resolved[key]

    @property
    def session(self) -> AsyncSession:
        return self._session

    @property
    def auth_service(self) -> AuthService:
        return cast(AuthService, self._resolve("auth_service"))

    @property
    def amazon_service(self) -> AmazonLinkService:
        return cast(AmazonLinkService, self._resolve("amazon_service"))

    @property
    def reading_record_service(self) -> ReadingRecordService:
        return cast(ReadingRecordService, self._resolve("reading_record_service"))

    @property
    def like_service(self) -> LikeService:
        return cast(LikeService, self._resolve("like_service"))

    @property
    def theme_service(self) -> ThemeService:
        return cast(ThemeService, self._resolve("theme_service"))

    @property
    def settings_service(self) -> SettingsService:
        return cast(SettingsService, self._resolve("settings_service"))

    @property
    def prompt_template_service(self) -> PromptTemplateService:
        return cast(PromptTemplateService, self._resolve("prompt_template_service"))

    @property
    def draft_service(self) -> DraftService:
        return cast(DraftService, self._resolve("draft_service"))

    @property
    def catalog_service(self) -> CatalogService:
        return cast(CatalogService, self._resolve("catalog_service"))

    @property
    def wishlist_service(self) -> WishlistService:
        return cast(WishlistService, self._resolve("wishlist_service"))

    @property
    def meta_service(self) -> MetaService:
        return cast(MetaService, self._resolve("meta_service"))


async def get_uow(request: Request) -> AsyncIterator[UnitOfWork]:
    """Per-request dependency: one session, commit on success, rollback on exception."""
    session_maker = get_session_maker()
    async with session_maker() as session:
        try:
            yield UnitOfWork(session, request.app.state.services)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
