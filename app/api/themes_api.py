"""Writing themes, per-user settings and draft prompt templates."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from app.api.dependencies import UnitOfWork, get_current_user, get_uow
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
    PromptTemplateRequest,
    PromptTemplateResponse,
    ThemeRequest,
    ThemeResponse,
    ThemeStatResponse,
    UserSettingsRequest,
    UserSettingsResponse,
)
from app.core.errors import build_http_error, http_error_from_domain
from app.core.prompt_sanitizer import PromptValidationError
from app.db.models.prompt_template import DraftMode
from app.db.models.user import User
from app.services.settings_service import InvalidSettingsValueError
from app.services.theme_service import ThemeError, ThemeExistsError, ThemeNotFoundError

router = APIRouter()

THEME_NOT_FOUND = not_found("Theme not found")
THEME_EXISTS = ErrorExample(
    status_code=status.HTTP_409_CONFLICT,
    error="theme_exists",
    message="A theme with this name already exists",
    description="Duplicate theme name",
)


def _theme_http_error(exc: ThemeError) -> Exception:
    if isinstance(exc, ThemeNotFoundError):
        return http_error_from_domain(status.HTTP_404_NOT_FOUND, exc)
    if isinstance(exc, ThemeExistsError):
        return http_error_from_domain(status.HTTP_409_CONFLICT, exc)
    return http_error_from_domain(status.HTTP_400_BAD_REQUEST, exc)


@router.get(
    "/writing-themes",
    tags=["themes"],
    summary="List themes",
    response_model=DataResponse[list[ThemeResponse]],
    responses=error_responses(UNAUTHORIZED, RATE_LIMITED),
)
async def list_themes(
    request: Request,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[list[ThemeResponse]]:
    themes = await uow.theme_service.list_themes(current_user.id)
    return DataResponse(
        message="Themes retrieved successfully",
        data=[ThemeResponse.model_validate(theme) for theme in themes],
    )


@router.post(
    "/writing-themes",
    tags=["themes"],
    summary="Create theme",
    status_code=status.HTTP_201_CREATED,
    response_model=DataResponse[ThemeResponse],
    responses=error_responses(UNAUTHORIZED, THEME_EXISTS, RATE_LIMITED),
)
async def create_theme(
    request: Request,
    payload: ThemeRequest,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[ThemeResponse]:
    try:
        theme = await uow.theme_service.create_theme(current_user.id, payload.theme_name)
    except ThemeError as e:
        raise _theme_http_error(e) from e
    return DataResponse(
        message="Theme created successfully", data=ThemeResponse.model_validate(theme)
    )


@router.put(
    "/writing-themes/{theme_id}",
    tags=["themes"],
    summary="Rename theme",
    response_model=DataResponse[ThemeResponse],
    responses=error_responses(INVALID_ID, UNAUTHORIZED, THEME_NOT_FOUND, THEME_EXISTS, RATE_LIMITED),
)
async def rename_theme(
    request: Request,
    theme_id: int,
    payload: ThemeRequest,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[ThemeResponse]:
    try:
        theme = await uow.theme_service.rename_theme(theme_id, current_user.id, payload.theme_name)
    except ThemeError as e:
        raise _theme_http_error(e) from e
    return DataResponse(
        message="Theme updated successfully", data=ThemeResponse.model_validate(theme)
    )


@router.delete(
    "/writing-themes/{theme_id}",
    tags=["themes"],
    summary="Delete theme",
    description="Delete a theme. Its records are kept and become unthemed.",
    response_model=DataResponse[ThemeResponse],
    responses=error_responses(INVALID_ID, UNAUTHORIZED, THEME_NOT_FOUND, RATE_LIMITED),
)
async def delete_theme(
    request: Request,
    theme_id: int,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[ThemeResponse]:
    try:
        theme = await uow.theme_service.delete_theme(theme_id, current_user.id)
    except ThemeError as e:
        raise _theme_http_error(e) from e
    return DataResponse(
        message="Theme deleted successfully", data=ThemeResponse.model_validate(theme)
    )


@router.get(
    "/theme-stats",
    tags=["themes"],
    summary="Records per theme",
    response_model=DataResponse[list[ThemeStatResponse]],
    responses=error_responses(UNAUTHORIZED, RATE_LIMITED),
)
async def theme_stats(
    request: Request,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[list[ThemeStatResponse]]:
    stats = await uow.theme_service.theme_stats(current_user.id)
    return DataResponse(
        message="Theme stats retrieved successfully",
        data=[ThemeStatResponse.model_validate(stat) for stat in stats],
    )


@router.get(
    "/user-settings",
    tags=["settings"],
    summary="Get settings",
    response_model=DataResponse[UserSettingsResponse],
    responses=error_responses(UNAUTHORIZED, RATE_LIMITED),
)
async def get_user_settings(
    request: Request,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[UserSettingsResponse]:
    effective = await uow.settings_service.get_settings(current_user.id)
    return DataResponse(
        message="Settings retrieved successfully",
        data=UserSettingsResponse.model_validate(effective),
    )


@router.put(
    "/user-settings",
    tags=["settings"],
    summary="Update settings",
    response_model=DataResponse[UserSettingsResponse],
    responses=error_responses(UNAUTHORIZED, RATE_LIMITED),
)
async def update_user_settings(
    request: Request,
    payload: UserSettingsRequest,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[UserSettingsResponse]:
    try:
        effective = await uow.settings_service.update_settings(
            current_user.id,
            hide_spoilers=payload.hide_spoilers,
            draft_threshold=payload.draft_threshold,
        )
    except InvalidSettingsValueError as e:
        raise http_error_from_domain(status.HTTP_400_BAD_REQUEST, e) from e
    return DataResponse(
        message="Settings updated successfully",
        data=UserSettingsResponse.model_validate(effective),
    )


@router.get(
    "/prompt-templates",
    tags=["drafts"],
    summary="List prompt templates",
    description="Effective template per mode: the user's override or the built-in default.",
    response_model=DataResponse[list[PromptTemplateResponse]],
    responses=error_responses(UNAUTHORIZED, RATE_LIMITED),
)
async def list_prompt_templates(
    request: Request,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[list[PromptTemplateResponse]]:
    templates = await uow.prompt_template_service.list_templates(current_user.id)
    return DataResponse(
        message="Prompt templates retrieved successfully",
        data=[PromptTemplateResponse.model_validate(template) for template in templates],
    )


@router.put(
    "/prompt-templates",
    tags=["drafts"],
    summary="Save prompt template",
    response_model=DataResponse[PromptTemplateResponse],
    responses=error_responses(
        ErrorExample(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="invalid_template",
            message="Template contains disallowed instruction patterns.",
            description="Template rejected by the sanitizer",
        ),
        UNAUTHORIZED,
        RATE_LIMITED,
    ),
)
async def save_prompt_template(
    request: Request,
    payload: PromptTemplateRequest,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[PromptTemplateResponse]:
    try:
        template = await uow.prompt_template_service.save_template(
            current_user.id, payload.mode, payload.template_text
        )
    except PromptValidationError as exc:
        raise build_http_error(
            status_code=status.HTTP_400_BAD_REQUEST,
            error=exc.error_code,
            message=str(exc),
        ) from exc
    return DataResponse(
        message="Prompt template saved successfully",
        data=PromptTemplateResponse.model_validate(template),
    )


@router.delete(
    "/prompt-templates/{mode}",
    tags=["drafts"],
    summary="Reset prompt template",
    response_model=DataResponse[PromptTemplateResponse],
    responses=error_responses(UNAUTHORIZED, RATE_LIMITED),
)
async def reset_prompt_template(
    request: Request,
    mode: DraftMode,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[PromptTemplateResponse]:
    template = await uow.prompt_template_service.reset_template(current_user.id, mode)
    return DataResponse(
        message="Prompt template reset to default",
        data=PromptTemplateResponse.model_validate(template),
    )
