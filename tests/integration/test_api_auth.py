"""Integration tests for Google sign-in, token verification and anonymous sessions.

Google itself is never contacted: ``GoogleAuthVerifier.verify`` is patched to
return a fixed identity or raise the verifier's error.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import status
from httpx import AsyncClient
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas import LoginResponse, UserResponse
from app.core.auth import user_id_from_token
from app.core.google_auth import GoogleAuthVerifier, GoogleIdentity, GoogleTokenError
from app.db.models.user import User

pytestmark = pytest.mark.integration

CreateUser = Callable[..., Awaitable[tuple[User, dict[str, str]]]]


def _identity(**overrides: str) -> GoogleIdentity:
    claims = {
        "subject": "google-sub-123",
        "email": "yomu@example.com",
        "name": "読む人",
        "picture": "https://example.com/yomu.png",
    }
    claims.update(overrides)
    return GoogleIdentity(**claims)


class TestGoogleLogin:
    """Test the Google ID token exchange."""

    @pytest.mark.asyncio
    async def test_first_login_creates_user(
        self, async_http_client: AsyncClient, db_session: AsyncSession
    ) -> None:
        # Arrange
        verify = AsyncMock(return_value=_identity())

        # Act
        with patch.object(GoogleAuthVerifier, "verify", verify):
            response = await async_http_client.post(
                "/api/auth/google", json={"id_token": "google-id-token"}
            )

        # Assert
        assert response.status_code == status.HTTP_200_OK
        parsed = LoginResponse.model_validate(response.json())
        assert parsed.token_type == "bearer"
        assert parsed.user.email == "yomu@example.com"
        assert parsed.user.name == "読む人"
        assert user_id_from_token(parsed.token) == parsed.user.id
        verify.assert_awaited_once_with("google-id-token")

        user = (
            await db_session.execute(select(User).where(User.google_sub == "google-sub-123"))
        ).scalar_one()
        assert user.id == parsed.user.id

    @pytest.mark.asyncio
    async def test_second_login_refreshes_profile(
        self, async_http_client: AsyncClient, db_session: AsyncSession
    ) -> None:
        # Act
        with patch.object(GoogleAuthVerifier, "verify", AsyncMock(return_value=_identity())):
            first = await async_http_client.post("/api/auth/google", json={"id_token": "a"})
        with patch.object(
            GoogleAuthVerifier, "verify", AsyncMock(return_value=_identity(name="新しい名前"))
        ):
            second = await async_http_client.post("/api/auth/google", json={"id_token": "b"})

        # Assert
        assert first.json()["user"]["id"] == second.json()["user"]["id"]
        assert second.json()["user"]["name"] == "新しい名前"
        count = await db_session.scalar(select(func.count()).select_from(User))
        assert count == 1

    @pytest.mark.asyncio
    async def test_rejected_token(self, async_http_client: AsyncClient) -> None:
        verify = AsyncMock(side_effect=GoogleTokenError("Token expired"))

        with patch.object(GoogleAuthVerifier, "verify", verify):
            response = await async_http_client.post(
                "/api/auth/google", json={"id_token": "expired"}
            )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "invalid_google_token"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_missing_token_is_validation_error(self, async_http_client: AsyncClient) -> None:
        response = await async_http_client.post("/api/auth/google", json={})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"] == "validation_error"


class TestVerifyToken:
    """Test the bearer token check."""

    @pytest.mark.asyncio
    async def test_returns_current_user(
        self, async_http_client: AsyncClient, create_user: CreateUser
    ) -> None:
        user, headers = await create_user(email="reader@example.com", name="Reader")

        response = await async_http_client.get("/api/auth/verify", headers=headers)

        assert response.status_code == status.HTTP_200_OK
        parsed = UserResponse.model_validate(response.json())
        assert parsed.id == user.id
        assert parsed.email == "reader@example.com"

    @pytest.mark.asyncio
    async def test_without_token(self, async_http_client: AsyncClient) -> None:
        response = await async_http_client.get("/api/auth/verify")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_with_garbage_token(self, async_http_client: AsyncClient) -> None:
        response = await async_http_client.get(
            "/api/auth/verify", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_token_for_deleted_user(
        self,
        async_http_client: AsyncClient,
        create_user: CreateUser,
        db_session: AsyncSession,
    ) -> None:
        user, headers = await create_user()
        await db_session.execute(delete(User).where(User.id == user.id))
        await db_session.commit()

        response = await async_http_client.get("/api/auth/verify", headers=headers)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
