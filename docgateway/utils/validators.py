# ABOUTME: Input validation and sanitization for untrusted request data
# ABOUTME: Screens analyze bodies, document identifiers, and API key header values

import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from docgateway.config import get_settings

UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}",
    re.IGNORECASE,
)

# Control bytes except tab, newline and carriage return
_CONTENT_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_TEXT_CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F-\x9F]")
_MARKUP_CHARS = re.compile(r"[<>\"'&]")

MAX_API_KEY_LENGTH = 256
DEFAULT_TITLE = "Untitled"
WORDS_PER_MINUTE = 200


@dataclass
class AnalyzePayload:
    """Sanitized POST /analyze body."""
    content: str
    title: str


@dataclass
class ValidationResult:
    """Either a sanitized payload or the reason it was rejected."""
    payload: Optional[AnalyzePayload] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def sanitize_content(content: str) -> str:
    """Strip NUL and other control bytes, keeping tabs and line breaks."""
    return _CONTENT_CONTROL_CHARS.sub("", content)


def sanitize_text(value: str, max_length: int) -> str:
    """
    Clean a user-supplied string destined for logs or display.

    Removes control characters and the markup characters <>"'& then
    truncates to max_length.
    """
    value = _TEXT_CONTROL_CHARS.sub("", value)
    value = _MARKUP_CHARS.sub("", value)
    return value[:max_length]


def count_words(content: str) -> int:
    """Number of non-empty whitespace-separated tokens."""
    return len(content.strip().split())


def reading_time_minutes(word_count: int) -> int:
    """Reading time at 200 words per minute, never less than one minute."""
    return max(1, math.ceil(word_count / WORDS_PER_MINUTE))


def is_valid_uuid(value: str) -> bool:
    """True if value is a canonical RFC 4122 UUID (versions 1-5)."""
    return isinstance(value, str) and UUID_PATTERN.fullmatch(value) is not None


def is_valid_api_key_format(key: str) -> bool:
    """
    Screen an API key header value before it is hashed.

    Rejects overlong values and anything containing quotes, semicolons,
    or a double dash.
    """
    if len(key) > MAX_API_KEY_LENGTH:
        return False
    if any(c in key for c in ("'", '"', ";")) or "--" in key:
        return False
    return True


def validate_analyze_payload(body: Any) -> ValidationResult:
    """
    Validate and sanitize a parsed POST /analyze body.

    Never raises; failures come back as ValidationResult.error with a
    message naming the violated limit.
    """
    settings = get_settings()

    if not isinstance(body, dict):
        return ValidationResult(error="Invalid request body")

    content = body.get("content")
    title = body.get("title")

    if content is None:
        return ValidationResult(error="Missing content field")
    if not isinstance(content, str):
        return ValidationResult(error="Content must be a string")

    content = sanitize_content(content)
    if not content.strip():
        return ValidationResult(error="Content cannot be empty")

    try:
        content_bytes = len(content.encode("utf-8"))
    except UnicodeEncodeError:
        return ValidationResult(error="Content is not valid UTF-8")

    if content_bytes > settings.max_content_bytes:
        return ValidationResult(
            error=f"Content too large (max {settings.max_content_bytes} bytes, received {content_bytes})"
        )

    word_count = count_words(content)
    if word_count > settings.max_content_words:
        return ValidationResult(
            error=f"Content too long (max {settings.max_content_words} words, received {word_count})"
        )

    sanitized_title = DEFAULT_TITLE
    if title is not None:
        if not isinstance(title, str):
            return ValidationResult(error="Title must be a string")
        if len(title) > settings.max_title_length:
            return ValidationResult(error=f"Title too long (max {settings.max_title_length} characters)")
        sanitized_title = sanitize_text(title, settings.max_title_length)

    return ValidationResult(payload=AnalyzePayload(content=content, title=sanitized_title))
