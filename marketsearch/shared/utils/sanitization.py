"""Input sanitization utilities for injection and display safety.

Allow-list checks reject invalid input outright; the strip helpers are
lossy by intent and only used where the caller accepts a degraded value
(log messages, display text, non-pattern filter values).
"""

import re
from typing import ClassVar

import nh3

from marketsearch.core.constants import MAX_LOG_MESSAGE_LENGTH


class InputSanitizer:
    """Sanitize and validate identifiers, handles, and free text.

    Parameterized queries or the escaped filter builder remain the
    primary defense; these helpers add a second layer for IDs that end
    up inside filter lists or URL path segments.
    """

    CONTROL_CHARS: ClassVar[re.Pattern[str]] = re.compile(r"[\x00-\x1f\x7f]")
    HANDLE_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"^[a-zA-Z0-9_-]+$")
    HANDLE_MIN_LENGTH: ClassVar[int] = 3
    HANDLE_MAX_LENGTH: ClassVar[int] = 50
    UUID_PATTERN: ClassVar[re.Pattern[str]] = re.compile(
        r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
        re.IGNORECASE,
    )
    ADDRESS_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"^[0-9a-fA-F.:]{1,45}$")

    @classmethod
    def strip_control_chars(cls, value: str) -> str:
        """Remove characters in 0x00-0x1F and 0x7F."""
        return cls.CONTROL_CHARS.sub("", value)

    @classmethod
    def is_valid_handle(cls, value: object) -> bool:
        """True if value is a 3-50 char handle of letters, digits, '_' or '-'.

        Handles are used as URL path segments downstream, so anything that
        could traverse paths ('/', '.') or carry control characters fails.
        """
        if not isinstance(value, str):
            return False
        if not cls.HANDLE_MIN_LENGTH <= len(value) <= cls.HANDLE_MAX_LENGTH:
            return False
        return bool(cls.HANDLE_PATTERN.fullmatch(value))

    @classmethod
    def is_valid_uuid(cls, value: object) -> bool:
        """True if value is a canonical 8-4-4-4-12 hex UUID string."""
        return isinstance(value, str) and bool(cls.UUID_PATTERN.fullmatch(value))

    @classmethod
    def sanitize_display_text(cls, value: str | None, max_length: int) -> str | None:
        """Strip all HTML (nh3, no tags allowed) and control chars, then cap length.

        Returns None for empty results so optional fields stay absent.
        """
        if not value:
            return None
        cleaned = nh3.clean(value, tags=set(), attributes={})
        cleaned = cls.strip_control_chars(cleaned).strip()[:max_length]
        return cleaned or None

    @classmethod
    def sanitize_log_message(
        cls, value: object, max_length: int = MAX_LOG_MESSAGE_LENGTH
    ) -> str:
        """Render any value as a single-line, length-capped string for logs."""
        text = cls.strip_control_chars(str(value).replace("\n", " "))
        if len(text) > max_length:
            return text[: max_length - 3] + "..."
        return text

    @classmethod
    def sanitize_client_address(cls, value: str | None) -> str | None:
        """Return the address if it looks like IPv4/IPv6, else None (prevents key injection)."""
        if not value:
            return None
        candidate = value.strip()
        if not cls.ADDRESS_PATTERN.fullmatch(candidate):
            return None
        return candidate


def is_valid_handle(value: object) -> bool:
    """Validate a creator handle; see InputSanitizer.is_valid_handle."""
    return InputSanitizer.is_valid_handle(value)


def is_valid_uuid(value: object) -> bool:
    """Validate a UUID string; see InputSanitizer.is_valid_uuid."""
    return InputSanitizer.is_valid_uuid(value)


def sanitize_log_message(value: object, max_length: int = MAX_LOG_MESSAGE_LENGTH) -> str:
    """Single-line, length-capped rendering of value for logs."""
    return InputSanitizer.sanitize_log_message(value, max_length=max_length)
