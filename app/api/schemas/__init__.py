"""API request and response schemas.

Import request/response models from the submodules (e.g. auth_request_models,
record_response_models) or from this package for a single entry point.
"""

from __future__ import annotations

from app.api.schemas.auth_request_models import GoogleLoginRequest
from app.api.schemas.auth_response_models import LoginResponse, SessionResponse, UserResponse
from app.api.schemas.catalog_models import (
    AmazonInfoRequest,
    AmazonInfoResponse,
    BookRequest,
    BookResponse,
    BookUpdateRequest,
    TagResponse,
    WishlistItemRequest,
    WishlistItemResponse,
)
from app.api.schemas.common_response_models import DataResponse
from app.api.schemas.draft_models import (
    RecordAssistRequest,
    ThemeDraftRequest,
    ThemeDraftResponse,
)
from app.api.schemas.meta_response_models import DatabaseTimeResponse, HealthResponse
from app.api.schemas.record_request_models import (
    LikeRequest,
    ReadingRecordCreateRequest,
    ReadingRecordUpdateRequest,
)
from app.api.schemas.record_response_models import (
    LikeResponse,
    ReadingRecordResponse,
    TitleSuggestionResponse,
)
from app.api.schemas.theme_models import (
    PromptTemplateRequest,
    PromptTemplateResponse,
    ThemeRequest,
    ThemeResponse,
    ThemeStatResponse,
    UserSettingsRequest,
    UserSettingsResponse,
)

__all__ = [
    "AmazonInfoRequest",
    "AmazonInfoResponse",
    "BookRequest",
    "BookResponse",
    "BookUpdateRequest",
    "DataResponse",
    "DatabaseTimeResponse",
    "GoogleLoginRequest",
    "HealthResponse",
    "LikeRequest",
    "LikeResponse",
    "LoginResponse",
    "PromptTemplateRequest",
    "PromptTemplateResponse",
    "ReadingRecordCreateRequest",
    "ReadingRecordResponse",
    "ReadingRecordUpdateRequest",
    "RecordAssistRequest",
    "SessionResponse",
    "TagResponse",
    "ThemeDraftRequest",
    "ThemeDraftResponse",
    "ThemeRequest",
    "ThemeResponse",
    "ThemeStatResponse",
    "TitleSuggestionResponse",
    "UserResponse",
    "UserSettingsRequest",
    "UserSettingsResponse",
    "WishlistItemRequest",
    "WishlistItemResponse",
]
