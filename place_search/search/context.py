from place_search.core.exceptions import InvalidParameter
from place_search.models import SearchContext


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def build_search_context(
    query: str | None,
    category: str | None,
    lat: float | None,
    lng: float | None,
    user_id: int | None = None,
    dev_token: str | None = None,
) -> SearchContext:
    """Validate raw search parameters and build the immutable context.

    This is the only place the query/category exclusivity is checked; the
    strategies rely on it.
    """
    has_query = not _is_blank(query)
    has_category = not _is_blank(category)

    if has_query and has_category:
        raise InvalidParameter("Provide either a search query or a category, not both")
    if not has_query and not has_category:
        raise InvalidParameter("A search query or a category is required")
    if lat is None or lng is None:
        raise InvalidParameter("Location (lat, lng) is required")

    return SearchContext(
        query=query.strip() if has_query else None,
        category=category.strip() if has_category else None,
        lat=lat,
        lng=lng,
        user_id=user_id,
        dev_token=dev_token or None,
    )
