from __future__ import annotations

import logging
import sys
import types
from importlib.metadata import PackageNotFoundError, version
from typing import Any, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ExceptionHandler

from app.api.router import router as api_router
from app.core.config import InvalidSettingsError, MissingRequiredSettingsError
from app.core.errors import (
    http_exception_handler,
    rate_limit_exception_handler,
    request_validation_exception_handler,
    unhandled_exception_handler,
)
from app.core.google_auth import GoogleAuthVerifier
from app.core.lifespan import lifespan
from app.core.logging import configure_logging
from app.core.rate_limit import limiter
from app.llm.client import build_llm_client
from app.services.amazon_service import amazon_service_factory_provider
from app.services.auth_service import auth_service_factory_provider
from app.services.catalog_service import catalog_service_factory_provider
from app.services.draft_service import draft_service_factory_provider
from app.services.like_service import like_service_factory_provider
from app.services.meta_service import meta_service_factory_provider
from app.services.prompt_template_service import prompt_template_service_factory_provider
from app.services.reading_record_service import reading_record_service_factory_provider
from app.services.settings_service import settings_service_factory_provider
from app.services.theme_service import theme_service_factory_provider
from app.services.wishlist_service import wishlist_service_factory_provider

# Import settings - this may raise MissingRequiredSettingsError
try:
    from app.core.config import settings
except MissingRequiredSettingsError as e:
    print("ERROR: Missing required environment variables:", file=sys.stderr)
    for field in e.missing_fields:
        print(f"  - {field}", file=sys.stderr)
    print(
        "\nPlease set these in your .env file (see env.example for reference)",
        file=sys.stderr,
    )
    sys.exit(1)
except InvalidSettingsError as e:
    print("ERROR: Invalid environment variable values:", file=sys.stderr)
    for field, message in e.invalid_fields:
        print(f"  - {field}: {message}", file=sys.stderr)
    print(
        "\nPlease update these in your .env file (see env.example for reference)",
        file=sys.stderr,
    )
    sys.exit(1)


def build_services() -> dict[str, Any]:
    """Service registry: factories taking the request session, or shared instances."""
    amazon_service = amazon_service_factory_provider()
    return {
        "auth_service": auth_service_factory_provider(GoogleAuthVerifier()),
        "amazon_service": amazon_service,
        "reading_record_service": reading_record_service_factory_provider(amazon_service),
        "like_service": like_service_factory_provider(),
        "theme_service": theme_service_factory_provider(),
        "settings_service": settings_service_factory_provider(),
        "prompt_template_service": prompt_template_service_factory_provider(),
        "draft_service": draft_service_factory_provider(build_llm_client()),
        "catalog_service": catalog_service_factory_provider(),
        "wishlist_service": wishlist_service_factory_provider(),
        "meta_service": meta_service_factory_provider(),
    }


def create_app() -> FastAPI:
    configure_logging()

    try:
        api_version = version("ichidan-dokusho-api")
    except PackageNotFoundError:
        api_version = "0.1.0"  # Fallback if package not installed
        logging.warning("ichidan-dokusho-api package not found, using fallback version 0.1.0")

    is_debug_mode = settings.environment == "local"
    app = FastAPI(
        title=settings.app_name,
        version=api_version,
        debug=is_debug_mode,
        lifespan=lifespan,
    )
    app.add_exception_handler(
        StarletteHTTPException, cast(ExceptionHandler, http_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast(ExceptionHandler, request_validation_exception_handler)
    )
    app.add_exception_handler(
        RateLimitExceeded, cast(ExceptionHandler, rate_limit_exception_handler)
    )
    app.add_exception_handler(Exception, cast(ExceptionHandler, unhandled_exception_handler))
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix="/api")

    app.state.services = types.MappingProxyType(build_services())

    return app


app = create_app()
