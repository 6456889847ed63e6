"""AI-assisted drafts. LLM failures degrade to templated text instead of errors."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from app.api.dependencies import UnitOfWork, get_current_user, get_uow
from app.api.openapi_responses import (
    RATE_LIMITED,
    UNAUTHORIZED,
    ErrorExample,
    error_responses,
    not_found,
)
from app.api.schemas import (
    DataResponse,
    RecordAssistRequest,
    ThemeDraftRequest,
    ThemeDraftResponse,
)
from app.core.errors import http_error_from_domain
from app.core.rate_limit import DRAFT_GENERATE_RATE_LIMIT, limit, rate_limit_user_or_ip_key
from app.db.models.user import User
from app.llm.schemas import RecordAssistance
from app.services.draft_service import NotEnoughRecordsError
from app.services.theme_service import ThemeNotFoundError

router = APIRouter(prefix="/drafts", tags=["drafts"])


@router.post(
    "",
    summary="Generate theme draft",
    description=(
        "Build a draft from the records filed under one of the caller's themes, "
        "with renditions for X, note and Zenn."
    ),
    response_model=DataResponse[ThemeDraftResponse],
    responses=error_responses(
        UNAUTHORIZED,
        not_found("Theme not found"),
        ErrorExample(
            status_code=status.HTTP_409_CONFLICT,
            error="not_enough_records",
            message="At least 5 records are needed for this theme (currently 2)",
            description="Theme has fewer records than the draft threshold",
            details={"count": 2, "threshold": 5},
        ),
        RATE_LIMITED,
    ),
)
@limit(DRAFT_GENERATE_RATE_LIMIT, key_func=rate_limit_user_or_ip_key)
async def generate_theme_draft(
    request: Request,
    payload: ThemeDraftRequest,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[ThemeDraftResponse]:
    try:
        draft = await uow.draft_service.generate_theme_draft(
            current_user.id, payload.theme_id, payload.mode
        )
    except ThemeNotFoundError as e:
        raise http_error_from_domain(status.HTTP_404_NOT_FOUND, e) from e
    except NotEnoughRecordsError as e:
        raise http_error_from_domain(status.HTTP_409_CONFLICT, e) from e
    return DataResponse(
        message="Draft generated successfully", data=ThemeDraftResponse.model_validate(draft)
    )


@router.post(
    "/record",
    summary="Assist with one record",
    description="Organise a record's learning and turn its action into a concrete plan.",
    response_model=DataResponse[RecordAssistance],
    responses=error_responses(RATE_LIMITED),
)
@limit(DRAFT_GENERATE_RATE_LIMIT, key_func=rate_limit_user_or_ip_key)
async def assist_record(
    request: Request,
    payload: RecordAssistRequest,
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[RecordAssistance]:
    assistance = await uow.draft_service.assist_record(
        payload.title, payload.learning, payload.action
    )
    return DataResponse(message="Draft generated successfully", data=assistance)
