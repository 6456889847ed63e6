from app.db.models.book import Book, Tag, book_tags
from app.db.models.like import Like
from app.db.models.prompt_template import DraftMode, PromptTemplate
from app.db.models.reading_record import ReadingAmount, ReadingRecord
from app.db.models.user import User
from app.db.models.user_settings import UserSettings
from app.db.models.wishlist_item import WishlistItem
from app.db.models.writing_theme import WritingTheme

__all__ = [
    "Book",
    "DraftMode",
    "Like",
    "PromptTemplate",
    "ReadingAmount",
    "ReadingRecord",
    "Tag",
    "User",
    "UserSettings",
    "WishlistItem",
    "WritingTheme",
    "book_tags",
]
