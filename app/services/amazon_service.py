"""Amazon link handling: affiliate conversion and title lookup."""

from __future__ import annotations

import html
import logging
import re
from typing import Final
from urllib.parse import urlparse

import httpx

from app.core.config import settings
from app.core.errors import DomainError

logger = logging.getLogger(__name__)

AMAZON_HOSTS: Final[tuple[str, ...]] = (
    "amazon.co.jp",
    "amazon.com",
    "amazon.co.uk",
    "amazon.de",
    "amazon.fr",
    "amazon.it",
    "amazon.es",
    "amazon.ca",
    "amazon.com.au",
)
SHORT_LINK_HOSTS: Final[tuple[str, ...]] = ("amzn.to", "amzn.asia")
# Affiliate conversion only applies to the Japanese store.
AFFILIATE_HOSTS: Final[tuple[str, ...]] = ("amazon.co.jp", "amzn.asia")

ASIN_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"/dp/([A-Z0-9]{10})"),
    re.compile(r"/gp/product/([A-Z0-9]{10})"),
    re.compile(r"/exec/obidos/ASIN/([A-Z0-9]{10})"),
    re.compile(r"/o/ASIN/([A-Z0-9]{10})"),
    re.compile(r"/ASIN/([A-Z0-9]{10})"),
)

_PRODUCT_TITLE_PATTERN = re.compile(
    r'<span[^>]*id=["\']productTitle["\'][^>]*>(.*?)</span>', re.DOTALL | re.IGNORECASE
)
_HTML_TITLE_PATTERN = re.compile(r"<title[^>]*>(.*?)</title>", re.DOTALL | re.IGNORECASE)
# Page titles look like "Amazon.co.jp: <title> : <author>: 本" or "<title> | Amazon".
_TITLE_PREFIX_PATTERN = re.compile(r"^Amazon(\.[a-z.]+)?\s*[:：]\s*", re.IGNORECASE)
_TITLE_SUFFIX_PATTERN = re.compile(r"\s*[|｜]\s*Amazon.*$", re.IGNORECASE)

REQUEST_HEADERS: Final[dict[str, str]] = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "ja,en-US;q=0.7,en;q=0.3",
}
REQUEST_TIMEOUT_SECONDS: Final[float] = 15.0
MAX_REDIRECTS: Final[int] = 5


class AmazonLookupError(DomainError):
    """Raised when book information cannot be extracted from an Amazon page."""


def _hostname(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def _host_matches(hostname: str, domains: tuple[str, ...]) -> bool:
    return any(hostname == domain or hostname.endswith(f".{domain}") for domain in domains)


def is_amazon_link(url: str) -> bool:
    hostname = _hostname(url)
    return bool(hostname) and _host_matches(hostname, AMAZON_HOSTS + SHORT_LINK_HOSTS)


def extract_asin(url: str) -> str | None:
    for pattern in ASIN_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def build_affiliate_link(asin: str, affiliate_tag: str | None = None) -> str:
    tag = affiliate_tag or settings.amazon_affiliate_tag
    return f"https://www.amazon.co.jp/dp/{asin}/ref=nosim?tag={tag}"


def extract_title_from_html(page: str) -> str | None:
    match = _PRODUCT_TITLE_PATTERN.search(page)
    if match:
        title = " ".join(html.unescape(match.group(1)).split())
        if title:
            return title

    match = _HTML_TITLE_PATTERN.search(page)
    if not match:
        return None
    title = " ".join(html.unescape(match.group(1)).split())
    title = _TITLE_PREFIX_PATTERN.sub("", title)
    title = _TITLE_SUFFIX_PATTERN.sub("", title)
    # Drop trailing ": author: 本" style breadcrumbs.
    title = title.split(" : ")[0].strip()
    if not title or title.lower().startswith("amazon"):
        return None
    return title


class AmazonLinkService:
    """Resolves Amazon links over HTTP. Network failures never break the caller."""

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        self._client = http_client

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
            timeout=REQUEST_TIMEOUT_SECONDS,
            headers=REQUEST_HEADERS,
        )

    async def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url)
        async with self._new_client() as client:
            return await client.get(url)

    async def convert_to_affiliate_link(self, link: str | None) -> str | None:
        """Return an affiliate link for Japanese Amazon URLs, otherwise ``link`` unchanged."""
        if not link:
            return link
        hostname = _hostname(link)
        if not hostname or not _host_matches(hostname, AFFILIATE_HOSTS):
            return link

        # Direct product URLs are fetched too; a dead page keeps the original link.
        try:
            response = await self._get(link)
        except httpx.HTTPError as e:
            logger.warning(f"Amazon link resolution failed. Error: {e}")
            return link
        if response.status_code == 404 or response.status_code >= 500:
            logger.info(
                f"Amazon link returned {response.status_code}, keeping original: {link}"
            )
            return link

        asin = extract_asin(str(response.url))
        if asin is None:
            logger.info(f"ASIN not found for Amazon link: {link}")
            return link

        return build_affiliate_link(asin)

    async def extract_book_info(self, amazon_url: str) -> dict[str, str]:
        """Fetch an Amazon product page and return its title and canonical link."""
        if not is_amazon_link(amazon_url):
            raise AmazonLookupError("URL is not an Amazon link", "not_amazon_link")

        try:
            response = await self._get(amazon_url)
        except httpx.HTTPError as e:
            logger.error(f"Amazon page fetch failed. Error: {e}")
            raise AmazonLookupError("Amazon page could not be fetched", "amazon_unreachable") from e

        if response.status_code >= 400:
            raise AmazonLookupError(
                f"Amazon returned status {response.status_code}", "amazon_unreachable"
            )

        title = extract_title_from_html(response.text)
        if title is None:
            raise AmazonLookupError("Book title not found on the page", "title_not_found")

        asin = extract_asin(str(response.url)) or extract_asin(amazon_url)
        link = build_affiliate_link(asin) if asin else str(response.url)
        return {"title": title, "link": link}


def amazon_service_factory_provider(
    http_client: httpx.AsyncClient | None = None,
) -> AmazonLinkService:
    """The Amazon service holds no session state, so one instance serves every request."""
    return AmazonLinkService(http_client)
