"""Request and response models for the book catalog, wishlist and Amazon lookup."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.db.models.book import Book


class BookRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    amazon_link: str | None = Field(default=None, max_length=2048)
    tags: list[str] = Field(default_factory=list, max_length=30)


class BookUpdateRequest(BaseModel):
    title: str | None = Field(default=None, max_length=500)
    amazon_link: str | None = Field(default=None, max_length=2048)
    tags: list[str] | None = Field(default=None, max_length=30)


class BookResponse(BaseModel):
    id: int
    title: str
    amazon_link: str | None
    tags: list[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_book(cls, book: Book) -> BookResponse:
        return cls(
            id=book.id,
            title=book.title,
            amazon_link=book.amazon_link,
            tags=[tag.name for tag in book.tags],
            created_at=book.created_at,
            updated_at=book.updated_at,
        )


class TagResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    book_count: int


class WishlistItemRequest(BaseModel):
    title: str = Field(..., max_length=500)
    link: str | None = Field(default=None, max_length=2048)
    is_not_book: bool = False

    @field_validator("title")
    @classmethod
    def require_title(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class WishlistItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    link: str | None
    is_not_book: bool
    created_at: datetime


class AmazonInfoRequest(BaseModel):
    amazon_url: str = Field(..., min_length=1, max_length=2048)


class AmazonInfoResponse(BaseModel):
    title: str
    link: str
