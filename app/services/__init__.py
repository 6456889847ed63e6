from app.services.amazon_service import AmazonLinkService
from app.services.auth_service import AuthService
from app.services.catalog_service import CatalogService
from app.services.draft_service import DraftService
from app.services.like_service import LikeService
from app.services.meta_service import MetaService
from app.services.prompt_template_service import PromptTemplateService
from app.services.reading_record_service import ReadingRecordService
from app.services.settings_service import SettingsService
from app.services.theme_service import ThemeService
from app.services.wishlist_service import WishlistService

__all__ = [
    "AmazonLinkService",
    "AuthService",
    "CatalogService",
    "DraftService",
    "LikeService",
    "MetaService",
    "PromptTemplateService",
    "ReadingRecordService",
    "SettingsService",
    "ThemeService",
    "WishlistService",
]
