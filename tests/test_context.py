import pytest
from place_search.core.exceptions import InvalidParameter
from place_search.models import SearchType
from place_search.search.context import build_search_context


def test_query_context_is_ai_search():
    ctx = build_search_context("  quiet cafe  ", None, 37.5, 127.0, user_id=7)
    assert ctx.search_type == SearchType.AI_QUERY
    assert ctx.query == "quiet cafe"
    assert ctx.category is None
    assert ctx.user_id == 7


def test_category_context_is_category_search():
    ctx = build_search_context("   ", "cafe", 37.5, 127.0)
    assert ctx.search_type == SearchType.CATEGORY
    assert ctx.category == "cafe"
    assert ctx.query is None
    assert ctx.user_id is None


@pytest.mark.parametrize(
    "query,category",
    [
        ("coffee", "cafe"),
        (None, None),
        ("", ""),
        ("  ", "\t"),
    ],
)
def test_query_and_category_are_mutually_exclusive(query, category):
    with pytest.raises(InvalidParameter):
        build_search_context(query, category, 37.5, 127.0)


@pytest.mark.parametrize("lat,lng", [(None, 127.0), (37.5, None), (None, None)])
def test_location_is_required(lat, lng):
    with pytest.raises(InvalidParameter) as exc:
        build_search_context("coffee", None, lat, lng)
    assert "Location" in exc.value.message


def test_context_is_immutable():
    ctx = build_search_context(None, "cafe", 37.5, 127.0)
    with pytest.raises(Exception):
        ctx.category = "bar"


def test_empty_dev_token_is_dropped():
    ctx = build_search_context("coffee", None, 37.5, 127.0, dev_token="")
    assert ctx.dev_token is None
