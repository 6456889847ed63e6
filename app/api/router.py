from __future__ import annotations

from fastapi import APIRouter

from app.api.auth_api import router as auth_router
from app.api.catalog_api import router as catalog_router
from app.api.drafts_api import router as drafts_router
from app.api.meta_api import router as meta_router
from app.api.records_api import router as records_router
from app.api.themes_api import router as themes_router

router = APIRouter()

# Include sub-routers
router.include_router(meta_router)
router.include_router(auth_router)
router.include_router(records_router)
router.include_router(themes_router)
router.include_router(drafts_router)
router.include_router(catalog_router)
