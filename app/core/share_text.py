"""Share text for external platforms (X, note, Zenn)."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Final

SITE_URL: Final[str] = "https://ichidan-dokusho.netlify.app/"
HASHTAGS: Final[tuple[str, ...]] = ("#1段読書", "#読書習慣")
COMBINED_TEXT_LIMIT: Final[int] = 500
ELLIPSIS: Final[str] = "…"


class Platform(str, enum.Enum):
    X = "x"
    NOTE = "note"
    ZENN = "zenn"


@dataclass(frozen=True)
class PlatformRule:
    max_length: int | None
    keep_footer: bool


PLATFORM_RULES: Final[dict[Platform, PlatformRule]] = {
    Platform.X: PlatformRule(max_length=140, keep_footer=True),
    Platform.NOTE: PlatformRule(max_length=3000, keep_footer=True),
    Platform.ZENN: PlatformRule(max_length=None, keep_footer=False),
}


def is_within_limit(learning: str, action: str) -> bool:
    """Whether learning and action together fit the combined post limit."""
    return len(learning) + len(action) <= COMBINED_TEXT_LIMIT


def share_footer() -> str:
    return f"{' '.join(HASHTAGS)}\n\n👇 今すぐチェック！\n{SITE_URL}"


def generate_social_text(title: str, learning: str, action: str) -> str:
    return f"📖 {title}\n\n💡 {learning}\n\n🎯 {action}\n\n{share_footer()}"


def truncate(text: str, max_length: int) -> str:
    """Cut ``text`` to ``max_length`` characters, marking the cut with an ellipsis."""
    if len(text) <= max_length:
        return text
    if max_length <= len(ELLIPSIS):
        return text[:max_length]
    return text[: max_length - len(ELLIPSIS)].rstrip() + ELLIPSIS


def format_for_platform(body: str, platform: Platform) -> str:
    """Render ``body`` for ``platform``, keeping the footer intact when it fits."""
    rule = PLATFORM_RULES[platform]
    if not rule.keep_footer:
        return body if rule.max_length is None else truncate(body, rule.max_length)

    footer = share_footer()
    separator = "\n\n"
    full = f"{body}{separator}{footer}"
    if rule.max_length is None or len(full) <= rule.max_length:
        return full

    room = rule.max_length - len(footer) - len(separator)
    if room <= len(ELLIPSIS):
        # Footer alone does not leave space for content; the body wins.
        return truncate(body, rule.max_length)
    return f"{truncate(body, room)}{separator}{footer}"


def format_for_all_platforms(body: str) -> dict[str, str]:
    return {platform.value: format_for_platform(body, platform) for platform in Platform}
