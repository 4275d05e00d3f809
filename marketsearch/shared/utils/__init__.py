"""Shared utilities: sanitization."""

from marketsearch.shared.utils.sanitization import (
    InputSanitizer,
    is_valid_handle,
    is_valid_uuid,
    sanitize_log_message,
)

__all__ = [
    "InputSanitizer",
    "is_valid_handle",
    "is_valid_uuid",
    "sanitize_log_message",
]
