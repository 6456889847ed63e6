"""Book catalog, tag pages, admin maintenance, wishlist and Amazon lookup."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Request, status

from app.api.dependencies import UnitOfWork, get_current_user, get_uow, require_admin
from app.api.openapi_responses import (
    INVALID_ID,
    RATE_LIMITED,
    UNAUTHORIZED,
    ErrorExample,
    error_responses,
    not_found,
)
from app.api.schemas import (
    AmazonInfoRequest,
    AmazonInfoResponse,
    BookRequest,
    BookResponse,
    BookUpdateRequest,
    DataResponse,
    TagResponse,
    WishlistItemRequest,
    WishlistItemResponse,
)
from app.core.errors import http_error_from_domain
from app.core.rate_limit import (
    ADMIN_RATE_LIMIT,
    AMAZON_LOOKUP_RATE_LIMIT,
    limit,
    rate_limit_ip_key,
    rate_limit_user_or_ip_key,
)
from app.db.models.user import User
from app.services.amazon_service import AmazonLookupError
from app.services.catalog_service import CatalogError
from app.services.wishlist_service import WishlistItemNotFoundError

router = APIRouter()

ADMIN_UNAUTHORIZED = ErrorExample(
    status_code=status.HTTP_401_UNAUTHORIZED,
    error="unauthorized",
    message="Invalid admin credentials",
    description="Missing or wrong admin credentials",
)
BOOK_NOT_FOUND = not_found("Book not found")
TAG_NOT_FOUND = not_found("Tag not found")


@router.get(
    "/books",
    tags=["catalog"],
    summary="List books",
    response_model=DataResponse[list[BookResponse]],
    responses=error_responses(RATE_LIMITED),
)
async def list_books(
    request: Request, uow: UnitOfWork = Depends(get_uow)
) -> DataResponse[list[BookResponse]]:
    books = await uow.catalog_service.list_books()
    return DataResponse(
        message="Books retrieved successfully", data=[BookResponse.from_book(b) for b in books]
    )


@router.get(
    "/books/tag/{tag_name}",
    tags=["catalog"],
    summary="Books by tag",
    response_model=DataResponse[list[BookResponse]],
    responses=error_responses(TAG_NOT_FOUND, RATE_LIMITED),
)
async def list_books_by_tag(
    request: Request,
    tag_name: str = Path(..., min_length=1, max_length=100),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[list[BookResponse]]:
    try:
        books = await uow.catalog_service.list_books_by_tag(tag_name)
    except CatalogError as e:
        raise http_error_from_domain(status.HTTP_404_NOT_FOUND, e) from e
    return DataResponse(
        message="Books retrieved successfully", data=[BookResponse.from_book(b) for b in books]
    )


@router.get(
    "/tags",
    tags=["catalog"],
    summary="List tags",
    description="Every tag with its romaji slug and the number of books carrying it.",
    response_model=DataResponse[list[TagResponse]],
    responses=error_responses(RATE_LIMITED),
)
async def list_tags(
    request: Request, uow: UnitOfWork = Depends(get_uow)
) -> DataResponse[list[TagResponse]]:
    tags = await uow.catalog_service.list_tags()
    return DataResponse(
        message="Tags retrieved successfully",
        data=[TagResponse.model_validate(tag) for tag in tags],
    )


@router.get(
    "/tags/slug/{slug}",
    tags=["catalog"],
    summary="Resolve tag slug",
    response_model=DataResponse[TagResponse],
    responses=error_responses(TAG_NOT_FOUND, RATE_LIMITED),
)
async def get_tag_by_slug(
    request: Request,
    slug: str = Path(..., min_length=1, max_length=200),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[TagResponse]:
    try:
        tag = await uow.catalog_service.get_tag_by_slug(slug)
    except CatalogError as e:
        raise http_error_from_domain(status.HTTP_404_NOT_FOUND, e) from e
    return DataResponse(message="Tag retrieved successfully", data=TagResponse.model_validate(tag))


@router.post(
    "/admin/books",
    tags=["admin"],
    summary="Add book",
    status_code=status.HTTP_201_CREATED,
    response_model=DataResponse[BookResponse],
    responses=error_responses(ADMIN_UNAUTHORIZED, RATE_LIMITED),
)
@limit(ADMIN_RATE_LIMIT, key_func=rate_limit_ip_key)
async def create_book(
    request: Request,
    payload: BookRequest,
    _admin: str = Depends(require_admin),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[BookResponse]:
    book = await uow.catalog_service.create_book(payload.title, payload.amazon_link, payload.tags)
    return DataResponse(message="Book created successfully", data=BookResponse.from_book(book))


@router.put(
    "/books/{book_id}",
    tags=["admin"],
    summary="Update book",
    description="Update a book. When `tags` is sent it replaces the book's tags.",
    response_model=DataResponse[BookResponse],
    responses=error_responses(INVALID_ID, ADMIN_UNAUTHORIZED, BOOK_NOT_FOUND, RATE_LIMITED),
)
@limit(ADMIN_RATE_LIMIT, key_func=rate_limit_ip_key)
async def update_book(
    request: Request,
    book_id: int,
    payload: BookUpdateRequest,
    _admin: str = Depends(require_admin),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[BookResponse]:
    try:
        book = await uow.catalog_service.update_book(
            book_id, title=payload.title, amazon_link=payload.amazon_link, tags=payload.tags
        )
    except CatalogError as e:
        raise http_error_from_domain(status.HTTP_404_NOT_FOUND, e) from e
    return DataResponse(message="Book updated successfully", data=BookResponse.from_book(book))


@router.delete(
    "/books/{book_id}",
    tags=["admin"],
    summary="Delete book",
    response_model=DataResponse[BookResponse],
    responses=error_responses(INVALID_ID, ADMIN_UNAUTHORIZED, BOOK_NOT_FOUND, RATE_LIMITED),
)
@limit(ADMIN_RATE_LIMIT, key_func=rate_limit_ip_key)
async def delete_book(
    request: Request,
    book_id: int,
    _admin: str = Depends(require_admin),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[BookResponse]:
    try:
        book = await uow.catalog_service.delete_book(book_id)
    except CatalogError as e:
        raise http_error_from_domain(status.HTTP_404_NOT_FOUND, e) from e
    return DataResponse(message="Book deleted successfully", data=BookResponse.from_book(book))


@router.get(
    "/wishlist",
    tags=["wishlist"],
    summary="List wishlist",
    response_model=DataResponse[list[WishlistItemResponse]],
    responses=error_responses(UNAUTHORIZED, RATE_LIMITED),
)
async def list_wishlist(
    request: Request,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[list[WishlistItemResponse]]:
    items = await uow.wishlist_service.list_items(current_user.id)
    return DataResponse(
        message="Wishlist retrieved successfully",
        data=[WishlistItemResponse.model_validate(item) for item in items],
    )


@router.post(
    "/wishlist",
    tags=["wishlist"],
    summary="Add to wishlist",
    status_code=status.HTTP_201_CREATED,
    response_model=DataResponse[WishlistItemResponse],
    responses=error_responses(UNAUTHORIZED, RATE_LIMITED),
)
async def add_wishlist_item(
    request: Request,
    payload: WishlistItemRequest,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[WishlistItemResponse]:
    item = await uow.wishlist_service.add_item(
        current_user.id, payload.title, payload.link, payload.is_not_book
    )
    return DataResponse(
        message="Wishlist item added successfully",
        data=WishlistItemResponse.model_validate(item),
    )


@router.delete(
    "/wishlist/{item_id}",
    tags=["wishlist"],
    summary="Remove from wishlist",
    response_model=DataResponse[WishlistItemResponse],
    responses=error_responses(
        INVALID_ID, UNAUTHORIZED, not_found("Wishlist item not found"), RATE_LIMITED
    ),
)
async def remove_wishlist_item(
    request: Request,
    item_id: int,
    current_user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[WishlistItemResponse]:
    try:
        item = await uow.wishlist_service.remove_item(item_id, current_user.id)
    except WishlistItemNotFoundError as e:
        raise http_error_from_domain(status.HTTP_404_NOT_FOUND, e) from e
    return DataResponse(
        message="Wishlist item removed successfully",
        data=WishlistItemResponse.model_validate(item),
    )


@router.post(
    "/extract-amazon-info",
    tags=["catalog"],
    summary="Look up an Amazon page",
    description="Fetch an Amazon product page and return the book title and affiliate link.",
    response_model=DataResponse[AmazonInfoResponse],
    responses=error_responses(
        ErrorExample(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="not_amazon_link",
            message="URL is not an Amazon link",
            description="URL is not on an Amazon domain",
        ),
        ErrorExample(
            status_code=status.HTTP_502_BAD_GATEWAY,
            error="title_not_found",
            message="Book title not found on the page",
            description="Amazon page could not be fetched or parsed",
        ),
        RATE_LIMITED,
    ),
)
@limit(AMAZON_LOOKUP_RATE_LIMIT, key_func=rate_limit_user_or_ip_key)
async def extract_amazon_info(
    request: Request,
    payload: AmazonInfoRequest,
    uow: UnitOfWork = Depends(get_uow),
) -> DataResponse[AmazonInfoResponse]:
    try:
        info = await uow.amazon_service.extract_book_info(payload.amazon_url)
    except AmazonLookupError as e:
        status_code = (
            status.HTTP_400_BAD_REQUEST
            if e.error_code == "not_amazon_link"
            else status.HTTP_502_BAD_GATEWAY
        )
        raise http_error_from_domain(status_code, e) from e
    return DataResponse(
        message="Amazon info extracted successfully", data=AmazonInfoResponse(**info)
    )
