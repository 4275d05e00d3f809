"""Core: config, constants, rate-limit gate, and application bootstrap.

Single place for settings and shared constants.
"""

from marketsearch.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
