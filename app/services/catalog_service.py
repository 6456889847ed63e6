"""Admin-curated book catalog and its tags."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import Select, delete, func, insert, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import DomainError
from app.core.romanization import find_original_tag_name, romanize_tag_name
from app.db.models.book import Book, Tag, book_tags

MAX_TAG_LENGTH = 100


class CatalogError(DomainError):
    """Base error for catalog operations."""


class BookNotFoundError(CatalogError):
    def __init__(self, message: str = "Book not found") -> None:
        super().__init__(message, "not_found")


class TagNotFoundError(CatalogError):
    def __init__(self, message: str = "Tag not found") -> None:
        super().__init__(message, "not_found")


@dataclass(frozen=True)
class TagSummary:
    id: int
    name: str
    slug: str
    book_count: int


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """Trim, drop blanks and over-long names, de-duplicate keeping order."""
    seen: set[str] = set()
    cleaned: list[str] = []
    for tag in tags:
        name = tag.strip()
        if not name or len(name) > MAX_TAG_LENGTH or name in seen:
            continue
        seen.add(name)
        cleaned.append(name)
    return cleaned


class CatalogService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _books_query(self) -> Select[tuple[Book]]:
        return (
            select(Book)
            .options(selectinload(Book.tags))
            .order_by(Book.created_at.desc(), Book.id.desc())
        )

    async def list_books(self) -> list[Book]:
        result = await self._session.execute(self._books_query())
        return list(result.scalars().all())

    async def get_book(self, book_id: int) -> Book:
        result = await self._session.execute(
            select(Book)
            .options(selectinload(Book.tags))
            .where(Book.id == book_id)
            .execution_options(populate_existing=True)
        )
        book = result.scalar_one_or_none()
        if book is None:
            raise BookNotFoundError()
        return book

    async def list_books_by_tag(self, tag_name: str) -> list[Book]:
        tag_id = await self._session.scalar(select(Tag.id).where(Tag.name == tag_name))
        if tag_id is None:
            raise TagNotFoundError()
        result = await self._session.execute(
            self._books_query().join(book_tags, book_tags.c.book_id == Book.id).where(
                book_tags.c.tag_id == tag_id
            )
        )
        return list(result.scalars().all())

    async def list_tags(self) -> list[TagSummary]:
        result = await self._session.execute(
            select(Tag.id, Tag.name, func.count(book_tags.c.book_id))
            .outerjoin(book_tags, book_tags.c.tag_id == Tag.id)
            .group_by(Tag.id, Tag.name)
            .order_by(Tag.name)
        )
        return [
            TagSummary(id=tag_id, name=name, slug=romanize_tag_name(name), book_count=int(count))
            for tag_id, name, count in result.all()
        ]

    async def get_tag_by_slug(self, slug: str) -> TagSummary:
        tags = await self.list_tags()
        name = find_original_tag_name(slug, (tag.name for tag in tags))
        if name is None:
            raise TagNotFoundError()
        return next(tag for tag in tags if tag.name == name)

    async def _replace_tags(self, book_id: int, tag_names: list[str]) -> None:
        await self._session.execute(delete(book_tags).where(book_tags.c.book_id == book_id))
        if not tag_names:
            return
        await self._session.execute(
            pg_insert(Tag)
            .values([{"name": name} for name in tag_names])
            .on_conflict_do_nothing(index_elements=[Tag.name])
        )
        tag_ids = (
            await self._session.execute(select(Tag.id).where(Tag.name.in_(tag_names)))
        ).scalars()
        await self._session.execute(
            insert(book_tags), [{"book_id": book_id, "tag_id": tag_id} for tag_id in tag_ids]
        )

    async def create_book(
        self, title: str, amazon_link: str | None, tags: Iterable[str]
    ) -> Book:
        result = await self._session.execute(
            insert(Book).values(title=title.strip(), amazon_link=amazon_link).returning(Book.id)
        )
        book_id = result.scalar_one()
        await self._replace_tags(book_id, normalize_tags(tags))
        return await self.get_book(book_id)

    async def update_book(
        self,
        book_id: int,
        *,
        title: str | None = None,
        amazon_link: str | None = None,
        tags: Iterable[str] | None = None,
    ) -> Book:
        """Update the given fields; ``tags`` replaces the whole association when provided."""
        await self.get_book(book_id)
        values: dict[str, str | None] = {}
        if title is not None and title.strip():
            values["title"] = title.strip()
        if amazon_link is not None:
            values["amazon_link"] = amazon_link or None
        if values:
            await self._session.execute(update(Book).where(Book.id == book_id).values(**values))
        if tags is not None:
            await self._replace_tags(book_id, normalize_tags(tags))
        return await self.get_book(book_id)

    async def delete_book(self, book_id: int) -> Book:
        book = await self.get_book(book_id)
        await self._session.execute(delete(Book).where(Book.id == book_id))
        return book


def catalog_service_factory_provider() -> type[CatalogService]:
    return CatalogService
