"""Tests for ResultNormalizer (rows -> items, secondary lookups, aggregation)."""

from collections.abc import Mapping

import pytest

from marketsearch.application.dtos.rows import (
    CreatorRow,
    CreatorSummaryRow,
    ListingPhotoRow,
    ListingRow,
    ListingSearchRows,
)
from marketsearch.application.dtos.search import SearchCategory
from marketsearch.application.services.result_normalizer import (
    ResultNormalizer,
    format_price,
)
from tests.conftest import (
    CREATOR_1,
    LISTING_1,
    LISTING_2,
    PUBLIC_BASE_URL,
    creator_row,
    listing_row,
)


def _rows(*listings: dict, thumbnails=None, creators=None) -> ListingSearchRows:
    return ListingSearchRows(
        listings=tuple(ListingRow.from_mapping(row) for row in listings),
        thumbnails=thumbnails,
        creators=creators,
    )


class _LookupOnlyMapping(Mapping):
    """Mapping that counts full iterations (a copy iterates every key)."""

    def __init__(self, data: dict) -> None:
        self._data = data
        self.iterations = 0

    def __getitem__(self, key):
        return self._data[key]

    def __iter__(self):
        self.iterations += 1
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)


@pytest.fixture
def normalizer(thumbnail_resolver, metrics) -> ResultNormalizer:
    return ResultNormalizer(thumbnail_resolver=thumbnail_resolver, metrics=metrics)


@pytest.mark.parametrize(
    ("cents", "expected"),
    [(1250, "12.50"), (5, "0.05"), (0, "0.00"), (None, "0.00"), (100000, "1000.00"), (1, "0.01")],
)
def test_format_price(cents, expected) -> None:
    assert format_price(cents) == expected


class TestProducts:
    def test_full_product(self, normalizer) -> None:
        rows = _rows(
            listing_row(LISTING_1),
            thumbnails={LISTING_1: ListingPhotoRow(LISTING_1, f"{LISTING_1}/front.jpg")},
            creators={CREATOR_1: CreatorSummaryRow(CREATOR_1, "Jane Doe", "jane_doe")},
        )
        (product,) = normalizer.normalize_listings(rows)
        assert product.id == LISTING_1
        assert product.handle == LISTING_1
        assert product.title == "Vintage Jacket"
        assert product.price.amount == "12.50"
        assert product.price.currency_code == "USD"
        assert product.image.url == f"{PUBLIC_BASE_URL}/listing-photos/{LISTING_1}/front.jpg"
        assert product.image.alt_text == "Vintage Jacket"
        assert (product.image.width, product.image.height) == (400, 400)
        assert product.creator.handle == "jane_doe"
        assert product.creator.display_name == "Jane Doe"

    def test_untitled_listing_defaults(self, normalizer) -> None:
        rows = _rows(
            listing_row(LISTING_1, title=None, price_cents=None),
            thumbnails={LISTING_1: ListingPhotoRow(LISTING_1, "p.jpg")},
        )
        (product,) = normalizer.normalize_listings(rows)
        assert product.title == "Untitled Listing"
        assert product.image.alt_text == "Product image"
        assert product.price.amount == "0.00"

    def test_title_capped(self, normalizer) -> None:
        (product,) = normalizer.normalize_listings(_rows(listing_row(title="x" * 300)))
        assert len(product.title) == 200

    def test_no_photo_means_no_image(self, normalizer) -> None:
        (product,) = normalizer.normalize_listings(_rows(listing_row(), thumbnails={}))
        assert product.image is None

    def test_unsafe_storage_path_means_no_image(self, normalizer) -> None:
        rows = _rows(
            listing_row(LISTING_1),
            thumbnails={LISTING_1: ListingPhotoRow(LISTING_1, "../../secrets.txt")},
        )
        (product,) = normalizer.normalize_listings(rows)
        assert product.image is None

    def test_missing_creator_kept_without_creator(self, normalizer, metrics) -> None:
        (product,) = normalizer.normalize_listings(_rows(listing_row(), creators={}))
        assert product.creator is None
        assert metrics.dropped("listings", "missing_creator") == 1

    def test_failed_creator_lookup_not_counted(self, normalizer, metrics) -> None:
        (product,) = normalizer.normalize_listings(_rows(listing_row(), creators=None))
        assert product.creator is None
        assert metrics.dropped("listings", "missing_creator") == 0

    def test_creator_with_unsafe_handle_not_attached(self, normalizer, metrics) -> None:
        rows = _rows(
            listing_row(),
            creators={CREATOR_1: CreatorSummaryRow(CREATOR_1, "Evil", "../etc/passwd")},
        )
        (product,) = normalizer.normalize_listings(rows)
        assert product.creator is None
        assert metrics.dropped("listings", "invalid_handle") == 1

    def test_creator_lookup_read_not_copied_per_listing(self, normalizer) -> None:
        summaries = _LookupOnlyMapping({CREATOR_1: CreatorSummaryRow(CREATOR_1, "Jane Doe", "jane_doe")})
        rows = _rows(listing_row(LISTING_1), listing_row(LISTING_2), creators=summaries)
        products = normalizer.normalize_listings(rows)
        assert [p.creator.handle for p in products] == ["jane_doe", "jane_doe"]
        assert summaries.iterations == 0

    def test_store_order_preserved(self, normalizer) -> None:
        products = normalizer.normalize_listings(_rows(listing_row(LISTING_2), listing_row(LISTING_1)))
        assert [p.id for p in products] == [LISTING_2, LISTING_1]


class TestCreators:
    def test_display_name_falls_back_to_handle(self, normalizer) -> None:
        (item,) = normalizer.normalize_creators(
            [CreatorRow.from_mapping(creator_row(display_name=None))]
        )
        assert item.display_name == "jane_doe"
        assert item.verification_status == "verified"

    def test_path_traversal_handle_dropped(self, normalizer, metrics) -> None:
        items = normalizer.normalize_creators(
            [
                CreatorRow.from_mapping(creator_row(handle="../etc/passwd")),
                CreatorRow.from_mapping(creator_row(handle="ok_handle")),
            ]
        )
        assert [i.handle for i in items] == ["ok_handle"]
        assert metrics.dropped("creators", "invalid_handle") == 1

    @pytest.mark.parametrize("handle", ["ab", "a" * 51, "jane doe", "jane\x00", "jane/doe", "jane.doe"])
    def test_invalid_handles_dropped(self, normalizer, handle) -> None:
        assert normalizer.normalize_creators([CreatorRow.from_mapping(creator_row(handle=handle))]) == ()

    def test_bio_html_stripped(self, normalizer) -> None:
        (item,) = normalizer.normalize_creators(
            [CreatorRow.from_mapping(creator_row(bio="<b>Hand</b> made <i>goods</i>"))]
        )
        assert item.bio == "Hand made goods"

    def test_bio_capped(self, normalizer) -> None:
        (item,) = normalizer.normalize_creators(
            [CreatorRow.from_mapping(creator_row(bio="b" * 600))]
        )
        assert len(item.bio) == 500

    def test_empty_bio_is_none(self, normalizer) -> None:
        (item,) = normalizer.normalize_creators([CreatorRow.from_mapping(creator_row(bio=""))])
        assert item.bio is None


class TestAggregate:
    def test_total_is_sum_of_buckets(self, normalizer) -> None:
        result = normalizer.aggregate(
            _rows(listing_row(LISTING_1), listing_row(LISTING_2)),
            [CreatorRow.from_mapping(creator_row())],
        )
        assert result.total == 3
        assert len(result.products) == 2
        assert len(result.creators) == 1
        assert list(result.items) == list(SearchCategory)
        assert result.items[SearchCategory.ARTICLES] == ()

    def test_missing_sources_are_empty(self, normalizer) -> None:
        result = normalizer.aggregate(None, None)
        assert result.is_empty
        assert result.total == 0
