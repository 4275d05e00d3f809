"""Thumbnail resolver: storage path to public object URL.

Public buckets are served at `{base}/{bucket}/{path}`; no request is
made here, the URL is derived. Paths are checked before use so a stored
path cannot escape the bucket or inject a query string.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING
from urllib.parse import quote

if TYPE_CHECKING:
    from marketsearch.core.config import Settings

logger = logging.getLogger(__name__)

_MAX_PATH_LENGTH = 1024
_UNSAFE_PATH_RE = re.compile(r"[\x00-\x1f\x7f?#\\]")


def is_safe_storage_path(path: str) -> bool:
    """True for a relative object path with no traversal, query or control chars."""
    if not path or len(path) > _MAX_PATH_LENGTH or path.startswith("/"):
        return False
    if _UNSAFE_PATH_RE.search(path):
        return False
    return all(segment not in ("", ".", "..") for segment in path.split("/"))


class PublicBucketThumbnailResolver:
    """Resolves listing photo paths in a public storage bucket."""

    def __init__(self, public_base_url: str, bucket: str) -> None:
        """Initialize the resolver.

        Args:
            public_base_url: e.g. 'https://xyz.supabase.co/storage/v1/object/public'.
            bucket: Bucket holding listing photos.
        """
        self._prefix = f"{public_base_url.rstrip('/')}/{quote(bucket, safe='')}"

    def get_public_url(self, storage_path: str) -> str | None:
        if not is_safe_storage_path(storage_path):
            logger.debug("Skipping unsafe storage path")
            return None
        return f"{self._prefix}/{quote(storage_path, safe='/')}"


def create_thumbnail_resolver(settings: "Settings") -> PublicBucketThumbnailResolver | None:
    """Build the resolver from settings; None when no public base URL is known."""
    base_url = settings.resolved_storage_public_base_url
    if not base_url:
        return None
    return PublicBucketThumbnailResolver(base_url, settings.listing_photos_bucket)
