"""Unit tests for authentication utilities in app/core/auth.py.

These tests verify password hashing, JWT token creation and verification, and
the catalog admin credential check without any external dependencies.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException, status
from fastapi.security import HTTPBasicCredentials
from jose import jwt

from app.api.dependencies.current_user import get_current_user, get_optional_user, require_admin
from app.core import auth as auth_module
from app.core.auth import (
    create_access_token,
    get_password_hash,
    user_id_from_token,
    verify_admin_credentials,
    verify_password,
    verify_token,
)
from app.core.config import settings
from app.db.models.user import User


@pytest.fixture
def admin_credentials(monkeypatch: pytest.MonkeyPatch) -> tuple[str, str]:
    """Configure a catalog admin and return its plain credentials."""
    password = "correct horse battery staple"
    monkeypatch.setattr(auth_module.settings, "admin_username", "librarian")
    monkeypatch.setattr(auth_module.settings, "admin_password_hash", get_password_hash(password))
    return "librarian", password


def _uow_returning(user: User | None) -> MagicMock:
    uow = MagicMock()
    uow.auth_service.get_user_by_id = AsyncMock(return_value=user)
    return uow


class TestPasswordHashing:
    """Test password hashing and verification functions."""

    def test_get_password_hash_returns_string(self) -> None:
        """Test that password hashing returns a string."""
        password = "test_password_123"
        hashed = get_password_hash(password)

        assert isinstance(hashed, str)
        assert hashed != password

    def test_get_password_hash_different_for_same_password(self) -> None:
        """Bcrypt includes salt, so hashes should be different."""
        password = "test_password_123"

        assert get_password_hash(password) != get_password_hash(password)

    def test_verify_password_correct(self) -> None:
        hashed = get_password_hash("test_password_123")

        assert verify_password("test_password_123", hashed) is True

    def test_verify_password_incorrect(self) -> None:
        hashed = get_password_hash("test_password_123")

        assert verify_password("wrong_password", hashed) is False
        assert verify_password("", hashed) is False

    def test_password_hash_rejects_too_long_passwords(self) -> None:
        """Passwords longer than bcrypt's 72-byte limit are rejected."""
        with pytest.raises(ValueError, match="72 bytes"):
            get_password_hash("a" * 100)

    def test_multibyte_password_length_is_measured_in_bytes(self) -> None:
        # 25 kana are 75 bytes in UTF-8.
        with pytest.raises(ValueError, match="72 bytes"):
            get_password_hash("あ" * 25)


class TestJWTTokenCreation:
    """Test JWT token creation and verification."""

    def test_create_access_token_with_custom_expires_delta(self) -> None:
        """Test that create_access_token uses custom expiration time."""
        expires_delta = timedelta(minutes=30)
        token = create_access_token({"sub": "123"}, expires_delta=expires_delta)

        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        assert payload["sub"] == "123"

        exp_time = datetime.fromtimestamp(payload["exp"], tz=UTC)
        expected_time = datetime.now(UTC) + expires_delta
        assert abs((exp_time - expected_time).total_seconds()) < 5

    def test_create_access_token_with_default_expiration(self) -> None:
        """Test that create_access_token uses default expiration from settings."""
        token = create_access_token({"sub": "123"})

        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        exp_time = datetime.fromtimestamp(payload["exp"], tz=UTC)
        expected_time = datetime.now(UTC) + timedelta(
            minutes=settings.jwt_access_token_expire_minutes
        )
        assert abs((exp_time - expected_time).total_seconds()) < 5

    def test_create_access_token_preserves_data(self) -> None:
        token = create_access_token({"sub": "123", "email": "reader@example.com"})

        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        assert payload["email"] == "reader@example.com"


class TestJWTTokenVerification:
    """Test JWT token verification."""

    def test_verify_token_valid_token(self) -> None:
        payload = verify_token(create_access_token({"sub": "123", "custom": "value"}))

        assert payload is not None
        assert payload["sub"] == "123"
        assert payload["custom"] == "value"

    def test_verify_token_invalid_token(self) -> None:
        assert verify_token("invalid.token.here") is None

    def test_verify_token_wrong_secret(self) -> None:
        wrong_secret_token = jwt.encode({"sub": "123"}, "wrong_secret", algorithm=settings.jwt_algorithm)

        assert verify_token(wrong_secret_token) is None

    def test_verify_token_expired_token(self) -> None:
        expired_data = {"sub": "123", "exp": datetime.now(UTC) - timedelta(hours=1)}
        expired_token = jwt.encode(
            expired_data, settings.jwt_secret_key, algorithm=settings.jwt_algorithm
        )

        assert verify_token(expired_token) is None

    def test_verify_token_empty_string(self) -> None:
        assert verify_token("") is None


class TestUserIdFromToken:
    def test_returns_integer_subject(self) -> None:
        assert user_id_from_token(create_access_token({"sub": "42"})) == 42

    @pytest.mark.parametrize("token", [None, "", "invalid.token"])
    def test_missing_or_invalid_token(self, token: str | None) -> None:
        assert user_id_from_token(token) is None

    def test_missing_subject(self) -> None:
        assert user_id_from_token(create_access_token({})) is None

    def test_non_numeric_subject(self) -> None:
        assert user_id_from_token(create_access_token({"sub": "not_a_number"})) is None


class TestAdminCredentials:
    def test_accepts_configured_admin(self, admin_credentials: tuple[str, str]) -> None:
        username, password = admin_credentials

        assert verify_admin_credentials(username, password) is True

    def test_rejects_wrong_password(self, admin_credentials: tuple[str, str]) -> None:
        username, _ = admin_credentials

        assert verify_admin_credentials(username, "guess") is False

    def test_rejects_wrong_username(self, admin_credentials: tuple[str, str]) -> None:
        _, password = admin_credentials

        assert verify_admin_credentials("someone", password) is False

    def test_rejects_everything_when_unconfigured(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(auth_module.settings, "admin_username", None)
        monkeypatch.setattr(auth_module.settings, "admin_password_hash", None)

        assert verify_admin_credentials("admin", "admin") is False

    def test_overlong_password_is_rejected_not_raised(
        self, admin_credentials: tuple[str, str]
    ) -> None:
        username, _ = admin_credentials

        assert verify_admin_credentials(username, "x" * 100) is False

    def test_require_admin_raises_basic_challenge(
        self, admin_credentials: tuple[str, str]
    ) -> None:
        with pytest.raises(HTTPException) as exc_info:
            require_admin(HTTPBasicCredentials(username="librarian", password="nope"))

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED
        assert exc_info.value.headers == {"WWW-Authenticate": "Basic"}

    def test_require_admin_returns_username(self, admin_credentials: tuple[str, str]) -> None:
        username, password = admin_credentials

        assert require_admin(HTTPBasicCredentials(username=username, password=password)) == username


class TestGetCurrentUser:
    """Test the bearer-token user dependencies."""

    @pytest.mark.asyncio
    async def test_get_current_user_valid_token(self) -> None:
        # Arrange
        user = User(id=7, google_sub="sub-7", email="reader@example.com")
        uow = _uow_returning(user)
        token = create_access_token({"sub": "7"})

        # Act
        result = await get_current_user(token=token, uow=uow)

        # Assert
        assert result is user
        uow.auth_service.get_user_by_id.assert_awaited_once_with(7)

    @pytest.mark.asyncio
    async def test_get_current_user_invalid_token(self) -> None:
        uow = _uow_returning(None)

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(token="invalid.token", uow=uow)

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED
        assert "credentials" in exc_info.value.detail["message"].lower()
        uow.auth_service.get_user_by_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_current_user_nonexistent_user(self) -> None:
        uow = _uow_returning(None)

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(token=create_access_token({"sub": "999"}), uow=uow)

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_get_optional_user_anonymous(self) -> None:
        uow = _uow_returning(None)

        assert await get_optional_user(token=None, uow=uow) is None
        uow.auth_service.get_user_by_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_optional_user_signed_in(self) -> None:
        user = User(id=3, google_sub="sub-3", email="three@example.com")
        uow = _uow_returning(user)

        assert await get_optional_user(token=create_access_token({"sub": "3"}), uow=uow) is user
