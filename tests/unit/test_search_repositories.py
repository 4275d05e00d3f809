"""Tests for the listing and creator search repositories (stub store)."""

import pytest

from marketsearch.application.services.cancellation import CancellationFlag
from marketsearch.domain.exceptions import SearchTimeoutError, StoreError
from marketsearch.domain.value_objects.search import ResultLimit, SearchTerm
from marketsearch.infrastructure.persistence.repositories import (
    CreatorSearchRepository,
    ListingSearchRepository,
)
from tests.conftest import (
    CREATOR_1,
    CREATOR_2,
    LISTING_1,
    LISTING_2,
    StubStore,
    creator_row,
    listing_row,
)

TERM = SearchTerm("vintage")
LIMIT = ResultLimit(10)


class TestListingSearchRepository:
    async def test_first_reference_photo_is_thumbnail(self, stub_store, metrics) -> None:
        rows = await ListingSearchRepository(stub_store, metrics).search(TERM, LIMIT)
        assert [r.id for r in rows.listings] == [LISTING_2, LISTING_1]
        assert rows.thumbnails[LISTING_1].storage_path == f"{LISTING_1}/front.jpg"
        assert LISTING_2 not in rows.thumbnails

    async def test_photo_query_shape(self, stub_store) -> None:
        await ListingSearchRepository(stub_store).search(TERM, LIMIT)
        (query,) = stub_store.queries_for("listing_photos")
        assert [c.render() for c in query.filters] == ["photo_type.eq.reference"]
        (in_clause,) = query.in_filters
        assert in_clause.column == "listing_id"
        assert set(in_clause.values) == {LISTING_1, LISTING_2}
        assert query.order.render() == "created_at.asc"

    async def test_creator_ids_deduplicated(self, metrics) -> None:
        store = StubStore(
            tables={
                "listings": [
                    listing_row(LISTING_1, creator_id=CREATOR_1),
                    listing_row(LISTING_2, creator_id=CREATOR_1),
                ]
            }
        )
        await ListingSearchRepository(store, metrics).search(TERM, LIMIT)
        (query,) = store.queries_for("creators")
        assert query.in_filters[0].values == (CREATOR_1,)

    async def test_invalid_uuids_never_reach_in_filter(self, metrics) -> None:
        store = StubStore(
            tables={
                "listings": [
                    listing_row("not-a-uuid", creator_id="1),(id.neq.0"),
                    listing_row(LISTING_1, creator_id=CREATOR_2),
                ]
            }
        )
        await ListingSearchRepository(store, metrics).search(TERM, LIMIT)
        (photos,) = store.queries_for("listing_photos")
        (creators,) = store.queries_for("creators")
        assert photos.in_filters[0].values == (LISTING_1,)
        assert creators.in_filters[0].values == (CREATOR_2,)
        assert metrics.dropped("listings", "invalid_uuid") == 2

    async def test_no_valid_ids_skips_lookups(self) -> None:
        store = StubStore(tables={"listings": [listing_row("bad-id", creator_id=None)]})
        rows = await ListingSearchRepository(store).search(TERM, LIMIT)
        assert len(rows.listings) == 1
        assert store.calls("listing_photos") == 0
        assert store.calls("creators") == 0
        assert rows.thumbnails == {}

    async def test_photo_lookup_failure_keeps_listings(self) -> None:
        store = StubStore(
            tables={"listings": [listing_row()], "creators": [creator_row()]},
            errors={"listing_photos": StoreError("photos down", table="listing_photos")},
        )
        rows = await ListingSearchRepository(store).search(TERM, LIMIT)
        assert len(rows.listings) == 1
        assert rows.thumbnails is None
        assert CREATOR_1 in rows.creators

    async def test_listing_store_error_returns_empty(self) -> None:
        store = StubStore(errors={"listings": StoreError("down", table="listings", status_code=503)})
        rows = await ListingSearchRepository(store).search(TERM, LIMIT)
        assert rows.listings == ()
        assert store.calls() == 1

    async def test_malformed_row_is_dropped_alone(self, metrics) -> None:
        store = StubStore(tables={"listings": [{"id": 42, "title": "x"}, listing_row(LISTING_1)]})
        rows = await ListingSearchRepository(store, metrics).search(TERM, LIMIT)
        assert [r.id for r in rows.listings] == [LISTING_1]
        assert metrics.dropped("listings", "malformed_row") == 1

    async def test_only_malformed_rows_returns_empty(self) -> None:
        row = listing_row()
        row["price_cents"] = True
        store = StubStore(tables={"listings": [row]})
        rows = await ListingSearchRepository(store).search(TERM, LIMIT)
        assert rows.listings == ()
        assert store.calls("listing_photos") == 0

    async def test_malformed_photo_row_keeps_other_thumbnails(self, metrics) -> None:
        store = StubStore(
            tables={
                "listings": [listing_row(LISTING_1), listing_row(LISTING_2)],
                "listing_photos": [
                    {"listing_id": None, "storage_path": "x.jpg"},
                    {"listing_id": LISTING_1, "storage_path": f"{LISTING_1}/front.jpg"},
                ],
            }
        )
        rows = await ListingSearchRepository(store, metrics).search(TERM, LIMIT)
        assert set(rows.thumbnails) == {LISTING_1}
        assert metrics.dropped("listing_photos", "malformed_row") == 1

    async def test_cancelled_before_call_makes_no_store_call(self) -> None:
        store = StubStore(tables={"listings": [listing_row()]})
        cancel = CancellationFlag()
        cancel.set()
        with pytest.raises(SearchTimeoutError):
            await ListingSearchRepository(store).search(TERM, LIMIT, cancel)
        assert store.calls() == 0


class TestCreatorSearchRepository:
    async def test_returns_rows(self) -> None:
        store = StubStore(tables={"creators": [creator_row(), creator_row(CREATOR_2, handle="bob")]})
        rows = await CreatorSearchRepository(store).search(TERM, LIMIT)
        assert [r.id for r in rows] == [CREATOR_1, CREATOR_2]

    async def test_null_handle_row_is_kept_for_the_normalizer(self) -> None:
        bad = creator_row(CREATOR_2)
        bad["handle"] = None
        store = StubStore(tables={"creators": [creator_row(), bad]})
        rows = await CreatorSearchRepository(store).search(TERM, LIMIT)
        assert [r.id for r in rows] == [CREATOR_1, CREATOR_2]
        assert rows[1].handle is None

    async def test_non_string_handle_drops_only_that_row(self, metrics) -> None:
        bad = creator_row(CREATOR_2)
        bad["handle"] = 42
        store = StubStore(tables={"creators": [bad, creator_row()]})
        rows = await CreatorSearchRepository(store, metrics).search(TERM, LIMIT)
        assert [r.id for r in rows] == [CREATOR_1]
        assert metrics.dropped("creators", "malformed_row") == 1

    async def test_store_error_returns_empty(self) -> None:
        store = StubStore(errors={"creators": StoreError("down")})
        assert await CreatorSearchRepository(store, debug=True).search(TERM, LIMIT) == []

    async def test_cancelled_after_call_raises(self) -> None:
        cancel = CancellationFlag()

        class CancellingStore(StubStore):
            async def select(self, query):
                rows = await super().select(query)
                cancel.set()
                return rows

        store = CancellingStore(tables={"creators": [creator_row()]})
        with pytest.raises(SearchTimeoutError):
            await CreatorSearchRepository(store).search(TERM, LIMIT, cancel)
        assert store.calls() == 1
