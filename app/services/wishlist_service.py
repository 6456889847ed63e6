from __future__ import annotations

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DomainError
from app.db.models.wishlist_item import WishlistItem


class WishlistItemNotFoundError(DomainError):
    def __init__(self, message: str = "Wishlist item not found") -> None:
        super().__init__(message, "not_found")


class WishlistService:
    """Books a user intends to read. Links are stored as given."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_items(self, user_id: int) -> list[WishlistItem]:
        result = await self._session.execute(
            select(WishlistItem)
            .where(WishlistItem.user_id == user_id)
            .order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc())
        )
        return list(result.scalars().all())

    async def add_item(
        self, user_id: int, title: str, link: str | None = None, is_not_book: bool = False
    ) -> WishlistItem:
        result = await self._session.execute(
            insert(WishlistItem)
            .values(user_id=user_id, title=title.strip(), link=link or None, is_not_book=is_not_book)
            .returning(WishlistItem)
        )
        return result.scalar_one()

    async def remove_item(self, item_id: int, user_id: int) -> WishlistItem:
        result = await self._session.execute(
            delete(WishlistItem)
            .where(WishlistItem.id == item_id, WishlistItem.user_id == user_id)
            .returning(WishlistItem)
        )
        item = result.scalar_one_or_none()
        if item is None:
            raise WishlistItemNotFoundError()
        return item


def wishlist_service_factory_provider() -> type[WishlistService]:
    return WishlistService
