import pytest
from conftest import USER_LAT, USER_LNG, make_place
from place_search.core.exceptions import InvalidParameter, PlaceNotFound, UnsupportedSearchType
from place_search.search.dispatcher import StrategyDispatcher
from place_search.search.service import PlaceSearchService


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs",
    [
        {"query": "coffee", "category": "cafe", "lat": USER_LAT, "lng": USER_LNG},
        {"query": None, "category": None, "lat": USER_LAT, "lng": USER_LNG},
        {"query": " ", "category": "", "lat": USER_LAT, "lng": USER_LNG},
        {"query": "coffee", "lat": None, "lng": USER_LNG},
        {"category": "cafe", "lat": USER_LAT, "lng": None},
    ],
)
async def test_invalid_requests_touch_no_collaborator(pipeline_factory, kwargs):
    pipeline = pipeline_factory(places=[make_place(1, 100.0)])

    with pytest.raises(InvalidParameter):
        await pipeline.service.search(**kwargs, user_id=1)

    assert pipeline.collaborator_calls == 0
    assert await pipeline.cache.get("cafe", USER_LAT, USER_LNG) is None


@pytest.mark.asyncio
async def test_dispatch_by_request_kind(pipeline_factory):
    pipeline = pipeline_factory(places=[make_place(1, 100.0)])

    await pipeline.service.search(category="cafe", lat=USER_LAT, lng=USER_LNG)
    assert pipeline.ai_client.calls == []

    await pipeline.service.search(query="coffee", lat=USER_LAT, lng=USER_LNG)
    assert pipeline.ai_client.calls == [("coffee", None)]


@pytest.mark.asyncio
async def test_missing_strategy_is_a_configuration_error(pipeline_factory):
    pipeline = pipeline_factory()
    service = PlaceSearchService(
        StrategyDispatcher([pipeline.ai_strategy]), pipeline.enricher, pipeline.cache
    )

    with pytest.raises(UnsupportedSearchType):
        await service.search(category="cafe", lat=USER_LAT, lng=USER_LNG)


@pytest.mark.asyncio
async def test_categories_are_cached(pipeline_factory):
    pipeline = pipeline_factory(
        places=[
            make_place(1, 100.0, category="cafe"),
            make_place(2, 100.0, category="bar"),
            make_place(3, 100.0, category="cafe"),
        ]
    )

    assert await pipeline.service.list_categories() == ["bar", "cafe"]
    assert await pipeline.service.list_categories() == ["bar", "cafe"]
    assert pipeline.place_store.calls == [("distinct_categories",)]


@pytest.mark.asyncio
async def test_place_detail_for_signed_in_requester(pipeline_factory):
    place = make_place(5, 100.0, keywords=["coffee", "quiet"])
    place.update(road_address="1 Gangnam-daero", description="Roastery", phone="02-123-4567")
    pipeline = pipeline_factory(places=[place], counts={5: 7}, bookmarks={42: {5}})

    detail = await pipeline.service.get_place_detail(5, user_id=42)

    assert detail.id == 5
    assert detail.keywords == ["coffee", "quiet"]
    assert detail.address == "1 Gangnam-daero"
    assert detail.description == "Roastery"
    assert detail.phone == "02-123-4567"
    assert detail.moment_count == 7
    assert detail.is_bookmarked is True
    assert detail.location.coordinates == [place["longitude"], place["latitude"]]


@pytest.mark.asyncio
async def test_place_detail_for_anonymous_requester(pipeline_factory):
    pipeline = pipeline_factory(places=[make_place(5, 100.0)], bookmarks={42: {5}})

    detail = await pipeline.service.get_place_detail(5)

    assert detail.is_bookmarked is None
    assert detail.moment_count == 0


@pytest.mark.asyncio
async def test_unknown_place_detail_is_not_found(pipeline_factory):
    pipeline = pipeline_factory(places=[make_place(5, 100.0)])

    with pytest.raises(PlaceNotFound) as exc_info:
        await pipeline.service.get_place_detail(99, user_id=42)
    assert exc_info.value.status_code == 404
