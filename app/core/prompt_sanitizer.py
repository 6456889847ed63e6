from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

RECORDS_PLACEHOLDER = "{recordsText}"
THEME_PLACEHOLDER = "{themeName}"
MAX_TEMPLATE_LENGTH = 4000

_CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_TRAILING_SPACE_PATTERN = re.compile(r"[ \t]+$", re.MULTILINE)
_EXCESS_BLANK_LINES_PATTERN = re.compile(r"\n{3,}")
_INJECTION_PATTERNS = [
    re.compile(r"ignore (all|previous|prior) instructions", re.IGNORECASE),
    re.compile(r"system prompt", re.IGNORECASE),
    re.compile(r"developer message", re.IGNORECASE),
    re.compile(r"jailbreak", re.IGNORECASE),
    re.compile(r"(以前|前|上記)の(指示|命令)を(無視|忘れ)"),
    re.compile(r"システムプロンプト"),
]


class PromptValidationError(ValueError):
    """Raised when a prompt template fails sanitization."""

    error_code: str = "invalid_template"


def sanitize_template(template: str) -> str:
    """Validate a user-supplied draft template and return its normalized text.

    Templates are multi-line markdown, so line structure is preserved; only
    trailing whitespace and runs of blank lines are collapsed.
    """
    if _CONTROL_CHARS_PATTERN.search(template):
        raise PromptValidationError("Template contains unsupported control characters.")
    for pattern in _INJECTION_PATTERNS:
        if pattern.search(template):
            raise PromptValidationError("Template contains disallowed instruction patterns.")

    sanitized = template.replace("\r\n", "\n")
    sanitized = _TRAILING_SPACE_PATTERN.sub("", sanitized)
    sanitized = _EXCESS_BLANK_LINES_PATTERN.sub("\n\n", sanitized).strip()

    if not sanitized:
        raise PromptValidationError("Template must include text.")
    if len(sanitized) > MAX_TEMPLATE_LENGTH:
        raise PromptValidationError(
            f"Template must not exceed {MAX_TEMPLATE_LENGTH} characters."
        )
    if RECORDS_PLACEHOLDER not in sanitized:
        raise PromptValidationError(f"Template must contain the {RECORDS_PLACEHOLDER} placeholder.")

    if sanitized != template:
        logger.info(
            "Normalized prompt template",
            extra={"original_length": len(template), "sanitized_length": len(sanitized)},
        )

    return sanitized
