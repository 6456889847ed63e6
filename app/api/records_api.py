"""Reading records, the public timeline, and likes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, status

from app.api.dependencies import UnitOfWork, get_current_user, get_optional_user, get_uow
from app.api.openapi_responses import (
    INVALID_ID,
    RATE_LIMITED,
    UNAUTHORIZED,
    ErrorExample,
    error_responses,
    not_found,
)
from app.api.schemas import (
    DataResponse,
    LikeRequest,
    LikeResponse,
    ReadingRecordCreateRequest,
    ReadingRecordResponse,
    ReadingRecordUpdateRequest,
    TitleSuggestionResponse,
)
from app.core.errors import http_error_from_domain
from app.core.rate_limit import (
    LIKE_RATE_LIMIT,
    RECORD_CREATE_RATE_LIMIT,
    limit,
    rate_limit_user_or_ip_key,
)
from app.db.models.user import User
from app.services.like_service import LikeError, LikeRecordNotFoundError
from app.services.reading_record_service import (
    SEARCH_LIMIT_DEFAULT,
    SEARCH_LIMIT_MAX,
    InvalidThemeError,
    ReadingRecordError,
    RecordForbiddenError,
    RecordNotFoundError,
)

router = APIRouter(tags=["reading-records"])

RECORD_NOT_FOUND = not_found("Reading record not found")
NOT_OWNER = ErrorExample(
    status_code=status.HTTP_403_FORBIDDEN,
    error="forbidden",
    message="You can only modify your own reading records",
    description="Record belongs to another user",
)
INVALID_THEME = ErrorExample(
    status_code=status.HTTP_400_BAD_REQUEST,
    error="invalid_theme",
    message="Theme not found for this user",
    description="Theme does not belong to the caller",
)


def _record_http_error(exc: ReadingRecordError) -> Exception:
    if isinstance(exc, RecordNotFoundError):
        return http_error_from_domain(status.HTTP_404_NOT_FOUND, exc)
    if isinstance(exc, RecordForbiddenError):
        return http_error_from_domain(status.HTTP_403_FORBIDDEN, exc)
    if isinstance(exc, InvalidThemeError):
        return http_error_from_domain(status.HTTP_400_BAD_REQUEST, exc)
    return http_error_from_domain(status.HTTP_400_BAD_REQUEST, exc)


def _like_http_error(exc: LikeError) -> Exception:
    if isinstance(exc, LikeRecordNotFoundError):
        return http_error_from_domain(status.HTTP_404_NOT_FOUND, exc)
    return http_error_from_domain(status.HTTP_400_BAD_REQUEST, exc)


@router.get(
    "/reading-records",
    summary="Timeline",
    description="All reading records, newest first, with like counts for the viewer.",
    response_model=DataResponse[list[ReadingRecordResponse]],
    responses=error_responses(RATE_LIMITED),
)
async def list_reading_records(
    request: Request,
    session_id: str | None = Query(default=None, max_length=128),
    viewer: User | None = Depends(get_optional_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[list[ReadingRecordResponse]]:
    views = await uow.reading_record_service.list_timeline(
        viewer_id=viewer.id if viewer else None, session_id=session_id
    )
    return DataResponse(
        message="Reading records retrieved successfully",
        data=[ReadingRecordResponse.from_view(view) for view in views],
    )


@router.get(
    "/reading-records/search",
    summary="Search titles",
    description="Distinct previously recorded titles matching the query.",
    response_model=DataResponse[list[TitleSuggestionResponse]],
    responses=error_responses(RATE_LIMITED),
)
async def search_titles(
    request: Request,
    q: str = Query(..., min_length=1, max_length=200),
    limit_: int = Query(SEARCH_LIMIT_DEFAULT, alias="limit", ge=1, le=SEARCH_LIMIT_MAX),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[list[TitleSuggestionResponse]]:
    suggestions = await uow.reading_record_service.search_titles(q, limit_)
    return DataResponse(
        message="Titles retrieved successfully",
        data=[TitleSuggestionResponse.model_validate(item) for item in suggestions],
    )


@router.get(
    "/reading-records/{record_id}",
    summary="Get reading record",
    response_model=DataResponse[ReadingRecordResponse],
    responses=error_responses(INVALID_ID, RECORD_NOT_FOUND, RATE_LIMITED),
)
async def get_reading_record(
    request: Request,
    record_id: int,
    session_id: str | None = Query(default=None, max_length=128),
    viewer: User | None = Depends(get_optional_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[ReadingRecordResponse]:
    try:
        view = await uow.reading_record_service.get_record(
            record_id, viewer_id=viewer.id if viewer else None, session_id=session_id
        )
    except ReadingRecordError as e:
        raise _record_http_error(e) from e
    return DataResponse(
        message="Reading record retrieved successfully",
        data=ReadingRecordResponse.from_view(view),
    )


@router.post(
    "/reading-records",
    summary="Post reading record",
    description="Create a record. Signed-in callers own it; anonymous posts have no owner.",
    status_code=status.HTTP_201_CREATED,
    response_model=DataResponse[ReadingRecordResponse],
    responses=error_responses(INVALID_THEME, RATE_LIMITED),
)
@limit(RECORD_CREATE_RATE_LIMIT, key_func=rate_limit_user_or_ip_key)
async def create_reading_record(
    request: Request,
    payload: ReadingRecordCreateRequest,
    viewer: User | None = Depends(get_optional_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[ReadingRecordResponse]:
    try:
        record = await uow.reading_record_service.create_record(
            viewer.id if viewer else None, payload.model_dump(mode="json")
        )
    except ReadingRecordError as e:
        raise _record_http_error(e) from e
    return DataResponse(
        message="Reading record created successfully",
        data=ReadingRecordResponse.from_record(record),
    )


@router.put(
    "/reading-records/{record_id}",
    summary="Update reading record",
    description="Partial update by the owner. Blank required fields are ignored.",
    response_model=DataResponse[ReadingRecordResponse],
    responses=error_responses(
        INVALID_ID, INVALID_THEME, UNAUTHORIZED, NOT_OWNER, RECORD_NOT_FOUND, RATE_LIMITED
    ),
)
async def update_reading_record(
    request: Request,
    record_id: int,
    payload: ReadingRecordUpdateRequest,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[ReadingRecordResponse]:
    try:
        view = await uow.reading_record_service.update_record(
            record_id, current_user.id, payload.changes()
        )
    except ReadingRecordError as e:
        raise _record_http_error(e) from e
    return DataResponse(
        message="Reading record updated successfully",
        data=ReadingRecordResponse.from_view(view),
    )


@router.delete(
    "/reading-records/{record_id}",
    summary="Delete reading record",
    response_model=DataResponse[ReadingRecordResponse],
    responses=error_responses(INVALID_ID, UNAUTHORIZED, NOT_OWNER, RECORD_NOT_FOUND, RATE_LIMITED),
)
async def delete_reading_record(
    request: Request,
    record_id: int,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[ReadingRecordResponse]:
    try:
        view = await uow.reading_record_service.delete_record(record_id, current_user.id)
    except ReadingRecordError as e:
        raise _record_http_error(e) from e
    return DataResponse(
        message="Reading record deleted successfully",
        data=ReadingRecordResponse.from_view(view),
    )


@router.get(
    "/my-records",
    summary="My records",
    description="The caller's own records, newest first.",
    response_model=DataResponse[list[ReadingRecordResponse]],
    responses=error_responses(UNAUTHORIZED, RATE_LIMITED),
)
async def list_my_records(
    request: Request,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[list[ReadingRecordResponse]]:
    views = await uow.reading_record_service.list_user_records(current_user.id)
    return DataResponse(
        message="Reading records retrieved successfully",
        data=[ReadingRecordResponse.from_view(view) for view in views],
    )


@router.post(
    "/reading-records/{record_id}/like",
    summary="Like a record",
    description=(
        "Like as the signed-in user, or with `session_id` when anonymous. "
        "Liking twice is a no-op reported as `Already liked`."
    ),
    response_model=DataResponse[LikeResponse | None],
    responses=error_responses(
        INVALID_ID,
        ErrorExample(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="session_required",
            message="Session ID is required",
            description="Anonymous like without a session id",
        ),
        RECORD_NOT_FOUND,
        RATE_LIMITED,
    ),
)
@limit(LIKE_RATE_LIMIT, key_func=rate_limit_user_or_ip_key)
async def like_record(
    request: Request,
    record_id: int,
    payload: LikeRequest | None = None,
    viewer: User | None = Depends(get_optional_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[LikeResponse | None]:
    session_id = payload.session_id if payload else None
    try:
        like = await uow.like_service.add_like(
            record_id, user_id=viewer.id if viewer else None, session_id=session_id
        )
    except LikeError as e:
        raise _like_http_error(e) from e
    if like is None:
        return DataResponse(message="Already liked", data=None)
    return DataResponse(message="Like added successfully", data=LikeResponse.model_validate(like))


@router.delete(
    "/reading-records/{record_id}/like",
    summary="Remove like",
    response_model=DataResponse[LikeResponse | None],
    responses=error_responses(INVALID_ID, RECORD_NOT_FOUND, RATE_LIMITED),
)
@limit(LIKE_RATE_LIMIT, key_func=rate_limit_user_or_ip_key)
async def unlike_record(
    request: Request,
    record_id: int,
    session_id: str | None = Query(default=None, max_length=128),
    payload: LikeRequest | None = None,
    viewer: User | None = Depends(get_optional_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[LikeResponse | None]:
    session_id = session_id or (payload.session_id if payload else None)
    try:
        like = await uow.like_service.remove_like(
            record_id, user_id=viewer.id if viewer else None, session_id=session_id
        )
    except LikeError as e:
        raise _like_http_error(e) from e
    return DataResponse(
        message="Like removed successfully",
        data=LikeResponse.model_validate(like) if like else None,
    )
