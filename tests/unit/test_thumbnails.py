"""Tests for thumbnail URL resolution."""

import pytest

from marketsearch.core.config import Settings
from marketsearch.infrastructure.storage.thumbnails import (
    PublicBucketThumbnailResolver,
    create_thumbnail_resolver,
    is_safe_storage_path,
)
from tests.conftest import LISTING_1, PUBLIC_BASE_URL


def test_public_url(thumbnail_resolver) -> None:
    url = thumbnail_resolver.get_public_url(f"{LISTING_1}/front.jpg")
    assert url == f"{PUBLIC_BASE_URL}/listing-photos/{LISTING_1}/front.jpg"


def test_path_segments_are_quoted() -> None:
    resolver = PublicBucketThumbnailResolver("https://cdn.test/public/", "photos")
    assert resolver.get_public_url("a b/c%d.jpg") == "https://cdn.test/public/photos/a%20b/c%25d.jpg"


@pytest.mark.parametrize(
    "path",
    [
        "",
        "/etc/passwd",
        "../secrets.jpg",
        "a/../../b.jpg",
        "a//b.jpg",
        "a/./b.jpg",
        "photo.jpg?download=1",
        "photo.jpg#frag",
        "a\\b.jpg",
        "a\x00b.jpg",
        "x" * 1025,
    ],
)
def test_unsafe_paths_rejected(path: str, thumbnail_resolver) -> None:
    assert is_safe_storage_path(path) is False
    assert thumbnail_resolver.get_public_url(path) is None


def test_factory_without_base_url() -> None:
    assert create_thumbnail_resolver(Settings(_env_file=None)) is None


def test_factory_derives_from_store_url() -> None:
    settings = Settings(
        _env_file=None,
        store_url="https://xyz.supabase.co",
        store_service_key="k",
        listing_photos_bucket="shots",
    )
    resolver = create_thumbnail_resolver(settings)
    assert resolver is not None
    assert (
        resolver.get_public_url("p/1.jpg")
        == "https://xyz.supabase.co/storage/v1/object/public/shots/p/1.jpg"
    )
