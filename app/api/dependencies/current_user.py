"""Dependencies that identify the caller: bearer user, optional user, catalog admin."""

from __future__ import annotations

from fastapi import Depends, status
from fastapi.security import HTTPBasicCredentials

from app.api.dependencies.unit_of_work import UnitOfWork, get_uow
from app.core.auth import (
    admin_basic_scheme,
    oauth2_scheme,
    optional_oauth2_scheme,
    user_id_from_token,
    verify_admin_credentials,
)
from app.core.errors import build_http_error
from app.db.models.user import User


async def get_current_user(
    token: str = Depends(oauth2_scheme), uow: UnitOfWork = Depends(get_uow)
) -> User:
    """FastAPI dependency to get the current authenticated user."""
    credentials_exception = build_http_error(
        status_code=status.HTTP_401_UNAUTHORIZED,
        error="unauthorized",
        message="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    user_id = user_id_from_token(token)
    if user_id is None:
        raise credentials_exception

    user = await uow.auth_service.get_user_by_id(user_id)
    if user is None:
        raise credentials_exception

    return user


async def get_optional_user(
    token: str | None = Depends(optional_oauth2_scheme), uow: UnitOfWork = Depends(get_uow)
) -> User | None:
    """The signed-in user when a valid token is sent; anonymous callers get ``None``."""
    user_id = user_id_from_token(token)
    if user_id is None:
        return None
    return await uow.auth_service.get_user_by_id(user_id)


def require_admin(credentials: HTTPBasicCredentials = Depends(admin_basic_scheme)) -> str:
    """HTTP Basic check for catalog administration. Returns the admin username."""
    if not verify_admin_credentials(credentials.username, credentials.password):
        raise build_http_error(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="unauthorized",
            message="Invalid admin credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username
