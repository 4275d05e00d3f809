"""Raw store rows (read-model, no dependency on the store client).

Each row type parses itself from the mapping the store returns and
raises MalformedRowError when a required field is missing or mistyped,
so shape problems surface at the repository boundary.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from marketsearch.core.constants import (
    CREATORS_TABLE,
    LISTING_PHOTOS_TABLE,
    LISTINGS_TABLE,
)
from marketsearch.domain.exceptions import MalformedRowError


def _required_str(row: Mapping[str, Any], field: str, table: str) -> str:
    value = row.get(field)
    if not isinstance(value, str) or not value:
        raise MalformedRowError(table, field)
    return value


def _optional_str(row: Mapping[str, Any], field: str, table: str) -> str | None:
    value = row.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedRowError(table, field)
    return value


def _optional_int(row: Mapping[str, Any], field: str, table: str) -> int | None:
    value = row.get(field)
    if value is None:
        return None
    # bool is an int subclass; a boolean price is a shape error.
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedRowError(table, field)
    return value


@dataclass(frozen=True)
class ListingRow:
    """Listing matched by the search filter."""

    id: str
    title: str | None
    story: str | None
    price_cents: int | None
    creator_id: str | None
    created_at: str | None

    COLUMNS = ("id", "title", "story", "price_cents", "creator_id", "created_at")

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> ListingRow:
        if not isinstance(row, Mapping):
            raise MalformedRowError(LISTINGS_TABLE, "<row>")
        return cls(
            id=_required_str(row, "id", LISTINGS_TABLE),
            title=_optional_str(row, "title", LISTINGS_TABLE),
            story=_optional_str(row, "story", LISTINGS_TABLE),
            price_cents=_optional_int(row, "price_cents", LISTINGS_TABLE),
            creator_id=_optional_str(row, "creator_id", LISTINGS_TABLE),
            created_at=_optional_str(row, "created_at", LISTINGS_TABLE),
        )


@dataclass(frozen=True)
class ListingPhotoRow:
    """Reference photo of a listing (storage path, resolved to a URL later)."""

    listing_id: str
    storage_path: str | None

    COLUMNS = ("listing_id", "storage_path")

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> ListingPhotoRow:
        if not isinstance(row, Mapping):
            raise MalformedRowError(LISTING_PHOTOS_TABLE, "<row>")
        return cls(
            listing_id=_required_str(row, "listing_id", LISTING_PHOTOS_TABLE),
            storage_path=_optional_str(row, "storage_path", LISTING_PHOTOS_TABLE),
        )


@dataclass(frozen=True)
class CreatorRow:
    """Creator profile matched by the search filter."""

    id: str
    handle: str | None
    display_name: str | None
    bio: str | None
    profile_image_url: str | None
    verification_status: str | None

    COLUMNS = (
        "id",
        "handle",
        "display_name",
        "bio",
        "profile_image_url",
        "verification_status",
    )

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> CreatorRow:
        if not isinstance(row, Mapping):
            raise MalformedRowError(CREATORS_TABLE, "<row>")
        # Handle content (including a missing one) is judged by the result normalizer.
        return cls(
            id=_required_str(row, "id", CREATORS_TABLE),
            handle=_optional_str(row, "handle", CREATORS_TABLE),
            display_name=_optional_str(row, "display_name", CREATORS_TABLE),
            bio=_optional_str(row, "bio", CREATORS_TABLE),
            profile_image_url=_optional_str(row, "profile_image_url", CREATORS_TABLE),
            verification_status=_optional_str(row, "verification_status", CREATORS_TABLE),
        )


@dataclass(frozen=True)
class CreatorSummaryRow:
    """Creator summary attached to a product (secondary lookup)."""

    id: str
    display_name: str | None
    handle: str | None

    COLUMNS = ("id", "display_name", "handle")

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> CreatorSummaryRow:
        if not isinstance(row, Mapping):
            raise MalformedRowError(CREATORS_TABLE, "<row>")
        return cls(
            id=_required_str(row, "id", CREATORS_TABLE),
            display_name=_optional_str(row, "display_name", CREATORS_TABLE),
            handle=_optional_str(row, "handle", CREATORS_TABLE),
        )


@dataclass(frozen=True)
class ListingSearchRows:
    """Listing rows plus their secondary lookups, as returned by the listings source."""

    listings: tuple[ListingRow, ...] = ()
    # listing_id -> first reference photo (ordered by created_at ascending)
    thumbnails: Mapping[str, ListingPhotoRow] | None = None
    # creator_id -> summary
    creators: Mapping[str, CreatorSummaryRow] | None = None
