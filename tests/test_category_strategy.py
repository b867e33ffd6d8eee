import pytest
from conftest import USER_LAT, USER_LNG, make_place
from place_search.core.exceptions import UpstreamFailure
from place_search.search.strategies.category import CategorySearchStrategy


def category_calls(pipeline):
    return [c for c in pipeline.place_store.calls if c[0] == "by_category_within_radius"]


@pytest.mark.asyncio
async def test_store_order_and_distance_formatting(pipeline_factory):
    pipeline = pipeline_factory(
        places=[make_place(6, 1500.0), make_place(5, 100.0)],
        counts={5: 2, 6: 9},
    )

    results = await pipeline.service.search(category="cafe", lat=USER_LAT, lng=USER_LNG)

    assert [r.id for r in results] == [5, 6]
    assert [r.distance for r in results] == [100.0, 1.5]
    assert [r.moment_count for r in results] == [2, 9]
    assert all(r.similarity_score is None for r in results)
    assert results[0].keywords == ["stored-5"]
    assert category_calls(pipeline) == [("by_category_within_radius", "cafe", 2000.0)]


@pytest.mark.asyncio
async def test_cache_hit_skips_store_and_uses_own_bookmarks(pipeline_factory):
    pipeline = pipeline_factory(
        places=[make_place(5, 100.0), make_place(6, 1500.0)],
        counts={5: 1},
        bookmarks={1: {5}, 2: {6}},
    )

    first = await pipeline.service.search(
        category="cafe", lat=USER_LAT, lng=USER_LNG, user_id=1
    )
    store_calls = len(pipeline.place_store.calls)
    moment_calls = len(pipeline.moment_store.calls)

    second = await pipeline.service.search(
        category="cafe", lat=USER_LAT, lng=USER_LNG, user_id=2
    )

    assert len(pipeline.place_store.calls) == store_calls
    assert len(pipeline.moment_store.calls) == moment_calls
    assert {r.id: r.is_bookmarked for r in first} == {5: True, 6: False}
    assert {r.id: r.is_bookmarked for r in second} == {5: False, 6: True}
    assert [r.model_dump(exclude={"is_bookmarked"}) for r in first] == [
        r.model_dump(exclude={"is_bookmarked"}) for r in second
    ]


@pytest.mark.asyncio
async def test_cached_payload_has_no_bookmark_state(pipeline_factory):
    pipeline = pipeline_factory(places=[make_place(5, 100.0)], bookmarks={1: {5}})

    await pipeline.service.search(category="cafe", lat=USER_LAT, lng=USER_LNG, user_id=1)

    cached = await pipeline.cache.get("cafe", USER_LAT, USER_LNG)
    assert len(cached) == 1
    assert "is_bookmarked" not in cached[0].model_dump()
    assert cached[0].moment_count == 0
    assert cached[0].keywords == ["stored-5"]


@pytest.mark.asyncio
async def test_nearby_location_shares_cache_entry(pipeline_factory):
    pipeline = pipeline_factory(places=[make_place(5, 100.0)])

    await pipeline.service.search(category="cafe", lat=37.4971, lng=127.0279)
    await pipeline.service.search(category="cafe", lat=37.4979, lng=127.0271)
    await pipeline.service.search(category="cafe", lat=37.5071, lng=127.0271)

    # Third point falls in another grid cell
    assert len(category_calls(pipeline)) == 2


@pytest.mark.asyncio
async def test_empty_result_is_cached(pipeline_factory):
    pipeline = pipeline_factory(places=[make_place(5, 100.0, category="bar")])

    assert await pipeline.service.search(category="cafe", lat=USER_LAT, lng=USER_LNG) == []
    assert await pipeline.cache.get("cafe", USER_LAT, USER_LNG) == []

    assert await pipeline.service.search(category="cafe", lat=USER_LAT, lng=USER_LNG) == []
    assert len(category_calls(pipeline)) == 1
    assert pipeline.bookmark_store.calls == []


@pytest.mark.asyncio
async def test_anonymous_requester_has_no_bookmarks(pipeline_factory):
    pipeline = pipeline_factory(places=[make_place(5, 100.0)], bookmarks={1: {5}})

    results = await pipeline.service.search(category="cafe", lat=USER_LAT, lng=USER_LNG)

    assert results[0].is_bookmarked is False


@pytest.mark.asyncio
async def test_lookup_failure_propagates_and_nothing_is_cached(pipeline_factory):
    pipeline = pipeline_factory(places=[make_place(5, 100.0)])

    async def broken(user_id, place_ids):
        raise UpstreamFailure("bookmark_store")

    pipeline.bookmark_store.get_bookmark_status_map = broken

    with pytest.raises(UpstreamFailure):
        await pipeline.service.search(
            category="cafe", lat=USER_LAT, lng=USER_LNG, user_id=1
        )
    assert await pipeline.cache.get("cafe", USER_LAT, USER_LNG) is None


@pytest.mark.asyncio
async def test_place_without_record_keeps_empty_keywords(pipeline_factory):
    pipeline = pipeline_factory(places=[make_place(5, 100.0)])
    resolve_records = pipeline.place_store.resolve_by_ids_with_keywords

    async def no_records(place_ids):
        await resolve_records(place_ids)
        return []

    pipeline.place_store.resolve_by_ids_with_keywords = no_records

    results = await pipeline.service.search(category="cafe", lat=USER_LAT, lng=USER_LNG)

    assert [r.id for r in results] == [5]
    assert results[0].keywords == []


def test_explicit_zero_radius_is_kept(pipeline_factory):
    pipeline = pipeline_factory()

    strategy = CategorySearchStrategy(pipeline.enricher, pipeline.cache, radius=0.0)

    assert strategy.radius == 0.0
