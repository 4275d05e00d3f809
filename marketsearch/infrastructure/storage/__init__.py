"""Object storage URL resolution for listing thumbnails."""

from marketsearch.infrastructure.storage.thumbnails import (
    PublicBucketThumbnailResolver,
    create_thumbnail_resolver,
)

__all__ = ["PublicBucketThumbnailResolver", "create_thumbnail_resolver"]
