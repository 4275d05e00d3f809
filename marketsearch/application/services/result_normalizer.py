"""Result normalizer and aggregator.

Reshapes raw store rows into uniform result items, resolving the
secondary lookups (thumbnail URLs, creator summaries) that the listings
source fetched alongside its rows, then merges the per-source items into
one PredictiveSearchResult.
"""

import logging
from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal

from marketsearch.application.dtos.rows import (
    CreatorRow,
    CreatorSummaryRow,
    ListingPhotoRow,
    ListingRow,
    ListingSearchRows,
)
from marketsearch.application.dtos.search import (
    CreatorItem,
    CreatorSummary,
    Money,
    PredictiveSearchResult,
    ProductImage,
    ProductItem,
)
from marketsearch.application.interfaces.services import IThumbnailResolver
from marketsearch.core.constants import (
    CREATORS_TABLE,
    DEFAULT_CURRENCY_CODE,
    DEFAULT_IMAGE_ALT,
    DEFAULT_IMAGE_HEIGHT,
    DEFAULT_IMAGE_WIDTH,
    LISTINGS_TABLE,
    MAX_BIO_LENGTH,
    MAX_DISPLAY_TITLE_LENGTH,
    UNTITLED_LISTING,
)
from marketsearch.domain.exceptions import PartialDataInconsistencyError
from marketsearch.shared.telemetry.metrics import (
    DROP_INVALID_HANDLE,
    DROP_MISSING_CREATOR,
    SearchMetrics,
)
from marketsearch.shared.utils.sanitization import InputSanitizer, sanitize_log_message

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


def format_price(price_cents: int | None) -> str:
    """Minor units to a two-place decimal string, half-up; None -> '0.00'."""
    if price_cents is None:
        return "0.00"
    return str((Decimal(price_cents) / 100).quantize(_CENTS, rounding=ROUND_HALF_UP))


class ResultNormalizer:
    """Turns source rows into ProductItem/CreatorItem and aggregates them."""

    def __init__(
        self,
        thumbnail_resolver: IThumbnailResolver | None = None,
        metrics: SearchMetrics | None = None,
    ) -> None:
        self.thumbnail_resolver = thumbnail_resolver
        self.metrics = metrics

    def _dropped(self, source: str, reason: str, count: int = 1) -> None:
        if self.metrics is not None:
            self.metrics.record_dropped(source, reason, count)

    def _image(self, photo: ListingPhotoRow | None, title: str | None) -> ProductImage | None:
        if photo is None or not photo.storage_path or self.thumbnail_resolver is None:
            return None
        url = self.thumbnail_resolver.get_public_url(photo.storage_path)
        if not url:
            return None
        return ProductImage(
            url=url,
            alt_text=title or DEFAULT_IMAGE_ALT,
            width=DEFAULT_IMAGE_WIDTH,
            height=DEFAULT_IMAGE_HEIGHT,
        )

    def _creator_summary(
        self,
        listing: ListingRow,
        creators: Mapping[str, CreatorSummaryRow] | None,
    ) -> CreatorSummary | None:
        """Attach the creator if the lookup returned it with a usable handle.

        A listing whose creator is missing from a successful lookup is kept
        without one; a failed lookup (creators is None) is not counted.
        """
        if not listing.creator_id or creators is None:
            return None
        summary = creators.get(listing.creator_id)
        if summary is None:
            inconsistency = PartialDataInconsistencyError("creator", listing.creator_id)
            logger.debug(
                "Listing %s: %s",
                sanitize_log_message(listing.id),
                sanitize_log_message(inconsistency.message),
            )
            self._dropped(LISTINGS_TABLE, DROP_MISSING_CREATOR)
            return None
        if not InputSanitizer.is_valid_handle(summary.handle):
            self._dropped(LISTINGS_TABLE, DROP_INVALID_HANDLE)
            return None
        return CreatorSummary(
            id=summary.id,
            display_name=summary.display_name or summary.handle,
            handle=summary.handle,
        )

    def to_product(self, listing: ListingRow, rows: ListingSearchRows) -> ProductItem:
        """Normalize one listing row, resolving its thumbnail and creator."""
        title = (listing.title or "")[:MAX_DISPLAY_TITLE_LENGTH] or None
        photo = rows.thumbnails.get(listing.id) if rows.thumbnails else None
        return ProductItem(
            id=listing.id,
            title=title or UNTITLED_LISTING,
            handle=listing.id,
            price=Money(amount=format_price(listing.price_cents), currency_code=DEFAULT_CURRENCY_CODE),
            image=self._image(photo, title),
            creator=self._creator_summary(listing, rows.creators),
        )

    def normalize_listings(self, rows: ListingSearchRows) -> tuple[ProductItem, ...]:
        """Normalize all listing rows, preserving store order."""
        return tuple(self.to_product(listing, rows) for listing in rows.listings)

    def to_creator(self, row: CreatorRow) -> CreatorItem | None:
        """Normalize one creator row; None (and counted) when its handle is unsafe."""
        if not InputSanitizer.is_valid_handle(row.handle):
            logger.debug("Dropping creator %s with invalid handle", sanitize_log_message(row.id))
            self._dropped(CREATORS_TABLE, DROP_INVALID_HANDLE)
            return None
        return CreatorItem(
            id=row.id,
            handle=row.handle,
            display_name=row.display_name or row.handle,
            bio=InputSanitizer.sanitize_display_text(row.bio, MAX_BIO_LENGTH),
            profile_image_url=row.profile_image_url or None,
            verification_status=row.verification_status or None,
        )

    def normalize_creators(self, rows: Iterable[CreatorRow]) -> tuple[CreatorItem, ...]:
        """Normalize creator rows, dropping unsafe handles, preserving store order."""
        items = (self.to_creator(row) for row in rows)
        return tuple(item for item in items if item is not None)

    def aggregate(
        self,
        listing_rows: ListingSearchRows | None,
        creator_rows: Iterable[CreatorRow] | None,
    ) -> PredictiveSearchResult:
        """Merge both sources into category buckets; a None source is an empty bucket."""
        products = self.normalize_listings(listing_rows) if listing_rows is not None else ()
        creators = self.normalize_creators(creator_rows) if creator_rows is not None else ()
        return PredictiveSearchResult(creators=creators, products=products)
