"""User service layer - Google sign-in and user lookup."""

from __future__ import annotations

from collections.abc import Callable

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import create_access_token
from app.core.errors import DomainError
from app.core.google_auth import GoogleTokenError, GoogleTokenVerifier
from app.db.models.user import User


class AuthenticationError(DomainError):
    """Base error for authentication-related failures."""


class InvalidGoogleTokenError(AuthenticationError):
    """Raised when the Google ID token is rejected."""

    def __init__(self, message: str = "Invalid Google token") -> None:
        super().__init__(message, "invalid_google_token")


class AuthService:
    """Exchanges Google ID tokens for API tokens and loads users."""

    def __init__(self, session: AsyncSession, verifier: GoogleTokenVerifier) -> None:
        self._session = session
        self._verifier = verifier

    async def login_with_google(self, id_token: str) -> tuple[str, User]:
        """Verify a Google ID token, upsert the user, and issue a JWT.

        Name, email and picture are refreshed from Google on every sign-in.

        Raises:
            InvalidGoogleTokenError: If Google rejects the token.
        """
        try:
            identity = await self._verifier.verify(id_token)
        except GoogleTokenError as e:
            raise InvalidGoogleTokenError(str(e)) from e

        stmt = insert(User).values(
            google_sub=identity.subject,
            email=identity.email,
            name=identity.name,
            picture=identity.picture,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[User.google_sub],
            set_={
                "email": stmt.excluded.email,
                "name": stmt.excluded.name,
                "picture": stmt.excluded.picture,
                "last_login_at": func.now(),
            },
        ).returning(User)
        result = await self._session.execute(stmt, execution_options={"populate_existing": True})
        user = result.scalar_one()

        token = create_access_token(data={"sub": str(user.id), "email": user.email})
        return token, user

    async def get_user_by_id(self, user_id: int) -> User | None:
        result = await self._session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()


def auth_service_factory_provider(
    verifier: GoogleTokenVerifier,
) -> Callable[[AsyncSession], AuthService]:
    def factory(session: AsyncSession) -> AuthService:
        return AuthService(session, verifier)

    return factory
