"""Integration tests for draft generation.

The LLM is replaced through a ``get_uow`` override so no completion server is needed.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterator, Awaitable, Callable
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI, Request, status
from httpx import AsyncClient

from app.api.dependencies import UnitOfWork, get_uow
from app.db.models.user import User
from app.db.session import get_session_maker
from app.llm.client import LLMClient, LLMUnavailableError, ReasoningEffort
from app.services.draft_service import draft_service_factory_provider

pytestmark = pytest.mark.integration

CreateUser = Callable[..., Awaitable[tuple[User, dict[str, str]]]]


class ScriptedLLMClient(LLMClient):
    """Returns a fixed answer, or raises, and keeps the prompts it received."""

    def __init__(self, answer: str = "", error: Exception | None = None) -> None:
        self.answer = answer
        self.error = error
        self.prompts: list[str] = []

    async def complete(self, prompt: str, *, reasoning_effort: ReasoningEffort = "medium") -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer


def _uow_override(llm_client: LLMClient) -> Callable[[Request], AsyncGenerator[UnitOfWork, None]]:
    """Return a get_uow dependency override that builds drafts with ``llm_client``."""

    async def override(request: Request) -> AsyncGenerator[UnitOfWork, None]:
        session_maker = get_session_maker()
        async with session_maker() as session:
            services = dict(request.app.state.services)
            services["draft_service"] = draft_service_factory_provider(llm_client)
            try:
                yield UnitOfWork(session, services)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return override


@pytest_asyncio.fixture
async def use_llm(async_app: FastAPI) -> AsyncIterator[Callable[[LLMClient], None]]:
    def install(client: LLMClient) -> None:
        async_app.dependency_overrides[get_uow] = _uow_override(client)

    yield install
    async_app.dependency_overrides.pop(get_uow, None)


async def _theme_with_records(
    client: AsyncClient, headers: dict[str, str], count: int, name: str = "習慣化"
) -> int:
    theme = await client.post("/api/writing-themes", json={"theme_name": name}, headers=headers)
    theme_id = int(theme.json()["data"]["id"])
    for index in range(count):
        response = await client.post(
            "/api/reading-records",
            json={
                "title": f"習慣の本{index + 1}",
                "reading_amount": "1章",
                "learning": f"学び{index + 1}",
                "action": f"行動{index + 1}",
                "theme_id": theme_id,
            },
            headers=headers,
        )
        assert response.status_code == status.HTTP_201_CREATED
    return theme_id


async def _lower_threshold(client: AsyncClient, headers: dict[str, str], threshold: int) -> None:
    response = await client.put(
        "/api/user-settings", json={"draft_threshold": threshold}, headers=headers
    )
    assert response.status_code == status.HTTP_200_OK


class TestThemeDraft:
    @pytest.mark.asyncio
    async def test_not_enough_records(
        self, async_http_client: AsyncClient, create_user: CreateUser
    ) -> None:
        # Arrange
        _, headers = await create_user()
        theme_id = await _theme_with_records(async_http_client, headers, 2)

        # Act
        response = await async_http_client.post(
            "/api/drafts", json={"theme_id": theme_id}, headers=headers
        )

        # Assert
        assert response.status_code == status.HTTP_409_CONFLICT
        body = response.json()
        assert body["error"] == "not_enough_records"
        assert body["details"] == {"count": 2, "threshold": 5}

    @pytest.mark.asyncio
    async def test_templated_draft_without_llm(
        self,
        async_http_client: AsyncClient,
        create_user: CreateUser,
        use_llm: Callable[[LLMClient], None],
    ) -> None:
        # Arrange
        _, headers = await create_user()
        await _lower_threshold(async_http_client, headers, 2)
        theme_id = await _theme_with_records(async_http_client, headers, 2)
        use_llm(ScriptedLLMClient(error=LLMUnavailableError("down")))

        # Act
        response = await async_http_client.post(
            "/api/drafts", json={"theme_id": theme_id, "mode": "fact"}, headers=headers
        )

        # Assert
        assert response.status_code == status.HTTP_200_OK, response.text
        draft = response.json()["data"]
        assert draft["is_fallback"] is True
        assert draft["mode"] == "fact"
        assert draft["record_count"] == 2
        assert draft["content"].startswith("# 習慣化：ファクトまとめ")
        assert "## 習慣の本1" in draft["content"]
        assert set(draft["platforms"]) == {"x", "note", "zenn"}
        assert len(draft["platforms"]["x"]) <= 140

    @pytest.mark.asyncio
    async def test_llm_draft_uses_user_template(
        self,
        async_http_client: AsyncClient,
        create_user: CreateUser,
        use_llm: Callable[[LLMClient], None],
    ) -> None:
        # Arrange
        _, headers = await create_user()
        await _lower_threshold(async_http_client, headers, 1)
        theme_id = await _theme_with_records(async_http_client, headers, 1)
        await async_http_client.put(
            "/api/prompt-templates",
            json={"mode": "essay", "template_text": "テーマ: {themeName}\n{recordsText}"},
            headers=headers,
        )
        llm = ScriptedLLMClient(answer="習慣についてのエッセイ")
        use_llm(llm)

        # Act
        response = await async_http_client.post(
            "/api/drafts", json={"theme_id": theme_id}, headers=headers
        )

        # Assert
        assert response.status_code == status.HTTP_200_OK, response.text
        draft: dict[str, Any] = response.json()["data"]
        assert draft["is_fallback"] is False
        assert draft["mode"] == "essay"
        assert draft["content"] == "習慣についてのエッセイ"
        assert draft["platforms"]["zenn"] == "習慣についてのエッセイ"
        assert llm.prompts == [
            "テーマ: 習慣化\n## 1. 習慣の本1\n- 学び: 学び1\n- アクション: 行動1"
        ]

    @pytest.mark.asyncio
    async def test_unknown_theme(
        self, async_http_client: AsyncClient, create_user: CreateUser
    ) -> None:
        _, headers = await create_user()

        response = await async_http_client.post(
            "/api/drafts", json={"theme_id": 999999}, headers=headers
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_requires_authentication(self, async_http_client: AsyncClient) -> None:
        response = await async_http_client.post("/api/drafts", json={"theme_id": 1})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestRecordAssistance:
    @pytest.mark.asyncio
    async def test_llm_assistance(
        self, async_http_client: AsyncClient, use_llm: Callable[[LLMClient], None]
    ) -> None:
        use_llm(ScriptedLLMClient(answer="整理済み"))

        response = await async_http_client.post(
            "/api/drafts/record",
            json={"title": "嫌われる勇気", "learning": "課題の分離", "action": "日記を書く"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "message": "Draft generated successfully",
            "data": {
                "learning_insights": "整理済み",
                "action_plan": "整理済み",
                "is_fallback": False,
            },
        }

    @pytest.mark.asyncio
    async def test_fallback_assistance(
        self, async_http_client: AsyncClient, use_llm: Callable[[LLMClient], None]
    ) -> None:
        use_llm(ScriptedLLMClient(error=LLMUnavailableError("down")))

        response = await async_http_client.post(
            "/api/drafts/record", json={"title": "嫌われる勇気", "learning": "課題の分離"}
        )

        data = response.json()["data"]
        assert data["is_fallback"] is True
        assert data["learning_insights"].startswith("【嫌われる勇気からの学びと気づき】")
        assert data["action_plan"] is None
