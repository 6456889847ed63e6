from __future__ import annotations

import secrets

from fastapi import APIRouter, Depends, Request, status

from app.api.dependencies import UnitOfWork, get_current_user, get_uow
from app.api.openapi_responses import RATE_LIMITED, UNAUTHORIZED, ErrorExample, error_responses
from app.api.schemas import (
    DataResponse,
    GoogleLoginRequest,
    LoginResponse,
    SessionResponse,
    UserResponse,
)
from app.core.errors import http_error_from_domain
from app.core.rate_limit import (
    AUTH_LOGIN_RATE_LIMIT,
    SESSION_CREATE_RATE_LIMIT,
    limit,
    rate_limit_ip_key,
)
from app.db.models.user import User
from app.services.auth_service import AuthenticationError

router = APIRouter()

SESSION_ID_BYTES = 24


@router.post(
    "/auth/google",
    tags=["auth"],
    summary="Sign in with Google",
    description="Exchange a Google ID token for an API bearer token.",
    response_model=LoginResponse,
    responses=error_responses(
        ErrorExample(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="invalid_google_token",
            message="Invalid Google token",
            description="Google rejected the ID token",
        ),
        RATE_LIMITED,
    ),
)
@limit(AUTH_LOGIN_RATE_LIMIT, key_func=rate_limit_ip_key)
async def google_login(
    request: Request,
    payload: GoogleLoginRequest,
    uow: UnitOfWork = Depends(get_uow),
) -> LoginResponse:
    """Verify the Google ID token and return a JWT for this API."""
    try:
        token, user = await uow.auth_service.login_with_google(payload.id_token)
    except AuthenticationError as e:
        raise http_error_from_domain(
            status.HTTP_401_UNAUTHORIZED, e, headers={"WWW-Authenticate": "Bearer"}
        ) from e
    return LoginResponse(token=token, user=UserResponse.model_validate(user))


@router.get(
    "/auth/verify",
    tags=["auth"],
    summary="Verify token",
    description="Return the user for the provided bearer token.",
    response_model=UserResponse,
    responses=error_responses(UNAUTHORIZED, RATE_LIMITED),
)
async def verify(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.post(
    "/session",
    tags=["auth"],
    summary="Create anonymous session",
    description="Mint a random session id that anonymous viewers use for likes.",
    response_model=DataResponse[SessionResponse],
    responses=error_responses(RATE_LIMITED),
)
@limit(SESSION_CREATE_RATE_LIMIT, key_func=rate_limit_ip_key)
async def create_session(request: Request) -> DataResponse[SessionResponse]:
    session_id = secrets.token_urlsafe(SESSION_ID_BYTES)
    return DataResponse(
        message="Session created successfully", data=SessionResponse(session_id=session_id)
    )
