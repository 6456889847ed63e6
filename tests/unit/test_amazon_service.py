"""Unit tests for Amazon link handling.

HTTP traffic goes through ``httpx.MockTransport`` so nothing leaves the process.
"""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from app.services.amazon_service import (
    AmazonLinkService,
    AmazonLookupError,
    build_affiliate_link,
    extract_asin,
    extract_title_from_html,
    is_amazon_link,
)

Handler = Callable[[httpx.Request], httpx.Response]

PRODUCT_PAGE = """
<html><head><title>Amazon.co.jp: 嫌われる勇気 : 岸見 一郎, 古賀 史健: 本</title></head>
<body><span id="productTitle" class="a-size-extra-large">
    嫌われる勇気 &amp; 自己啓発の源流
</span></body></html>
"""


def _service(handler: Handler) -> AmazonLinkService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
    return AmazonLinkService(http_client=client)


class TestLinkParsing:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.amazon.co.jp/dp/4478025819",
            "https://amazon.com/gp/product/4478025819",
            "https://amzn.asia/d/abc123",
            "https://amzn.to/3xyz",
        ],
    )
    def test_amazon_links_are_recognised(self, url: str) -> None:
        assert is_amazon_link(url) is True

    @pytest.mark.parametrize(
        "url",
        ["https://example.com/dp/4478025819", "https://notamazon.co.jp/dp/X", "not a url", ""],
    )
    def test_other_links_are_rejected(self, url: str) -> None:
        assert is_amazon_link(url) is False

    @pytest.mark.parametrize(
        ("url", "asin"),
        [
            ("https://www.amazon.co.jp/嫌われる勇気/dp/4478025819/ref=sr_1_1", "4478025819"),
            ("https://www.amazon.co.jp/gp/product/B00H7RACY8?psc=1", "B00H7RACY8"),
            ("https://www.amazon.co.jp/exec/obidos/ASIN/4478025819", "4478025819"),
            ("https://www.amazon.co.jp/s?k=book", None),
        ],
    )
    def test_extract_asin(self, url: str, asin: str | None) -> None:
        assert extract_asin(url) == asin

    def test_build_affiliate_link(self) -> None:
        assert (
            build_affiliate_link("4478025819", "tag-22")
            == "https://www.amazon.co.jp/dp/4478025819/ref=nosim?tag=tag-22"
        )


class TestTitleExtraction:
    def test_prefers_product_title(self) -> None:
        assert extract_title_from_html(PRODUCT_PAGE) == "嫌われる勇気 & 自己啓発の源流"

    def test_falls_back_to_page_title(self) -> None:
        page = "<title>Amazon.co.jp: 夜と霧 新版 : ヴィクトール・E・フランクル: 本</title>"
        assert extract_title_from_html(page) == "夜と霧 新版"

    def test_strips_store_suffix(self) -> None:
        page = "<title>Atomic Habits | Amazon.com</title>"
        assert extract_title_from_html(page) == "Atomic Habits"

    def test_store_only_title_is_not_a_book(self) -> None:
        assert extract_title_from_html("<title>Amazon.co.jp</title>") is None
        assert extract_title_from_html("<html></html>") is None


class TestConvertToAffiliateLink:
    @pytest.mark.asyncio
    async def test_direct_product_link_is_resolved(self) -> None:
        # Arrange
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, text=PRODUCT_PAGE)

        service = _service(handler)

        # Act
        result = await service.convert_to_affiliate_link(
            "https://www.amazon.co.jp/dp/4478025819?th=1"
        )

        # Assert
        assert result == build_affiliate_link("4478025819")
        assert requested == ["https://www.amazon.co.jp/dp/4478025819?th=1"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [404, 500, 503])
    async def test_dead_product_link_keeps_original(self, status_code: int) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code)

        link = "https://www.amazon.co.jp/dp/4478025819"
        assert await _service(handler).convert_to_affiliate_link(link) == link

    @pytest.mark.asyncio
    async def test_short_link_is_resolved_through_redirects(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "amzn.asia":
                return httpx.Response(
                    301, headers={"Location": "https://www.amazon.co.jp/dp/B00H7RACY8"}
                )
            return httpx.Response(200, text="<html></html>")

        result = await _service(handler).convert_to_affiliate_link("https://amzn.asia/d/abc123")

        assert result == build_affiliate_link("B00H7RACY8")

    @pytest.mark.asyncio
    async def test_not_found_keeps_original(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        link = "https://amzn.asia/d/missing"
        assert await _service(handler).convert_to_affiliate_link(link) == link

    @pytest.mark.asyncio
    async def test_network_error_keeps_original(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        link = "https://amzn.asia/d/offline"
        assert await _service(handler).convert_to_affiliate_link(link) == link

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "link",
        [None, "", "https://www.amazon.com/dp/4478025819", "https://example.com/book"],
    )
    async def test_non_japanese_links_are_untouched(self, link: str | None) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        assert await _service(handler).convert_to_affiliate_link(link) == link


class TestExtractBookInfo:
    @pytest.mark.asyncio
    async def test_returns_title_and_affiliate_link(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text=PRODUCT_PAGE)

        info = await _service(handler).extract_book_info(
            "https://www.amazon.co.jp/dp/4478025819"
        )

        assert info == {
            "title": "嫌われる勇気 & 自己啓発の源流",
            "link": build_affiliate_link("4478025819"),
        }

    @pytest.mark.asyncio
    async def test_rejects_non_amazon_url(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(AmazonLookupError) as exc_info:
            await _service(handler).extract_book_info("https://example.com/book")

        assert exc_info.value.error_code == "not_amazon_link"

    @pytest.mark.asyncio
    async def test_upstream_error_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        with pytest.raises(AmazonLookupError) as exc_info:
            await _service(handler).extract_book_info("https://www.amazon.co.jp/dp/4478025819")

        assert exc_info.value.error_code == "amazon_unreachable"

    @pytest.mark.asyncio
    async def test_network_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(AmazonLookupError) as exc_info:
            await _service(handler).extract_book_info("https://www.amazon.co.jp/dp/4478025819")

        assert exc_info.value.error_code == "amazon_unreachable"

    @pytest.mark.asyncio
    async def test_page_without_title(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html><body>captcha</body></html>")

        with pytest.raises(AmazonLookupError) as exc_info:
            await _service(handler).extract_book_info("https://www.amazon.co.jp/dp/4478025819")

        assert exc_info.value.error_code == "title_not_found"
