import logging
from place_search.cache.search_cache import SearchResultCache
from place_search.core.config import settings
from place_search.models import PlaceItem, SearchContext, SearchType
from place_search.search.enrichment import PlaceEnricher
from place_search.search.ranking import ranker
from place_search.search.strategies.base import PlaceSearchStrategy

logger = logging.getLogger(__name__)


class CategorySearchStrategy(PlaceSearchStrategy):
    """Category search with a read-through cache.

    The cache holds bookmark-agnostic payloads per (category, location grid).
    Bookmark status is requester specific and is fetched fresh on every call,
    hit or miss.
    """

    priority = 2

    def __init__(self, enricher: PlaceEnricher, cache: SearchResultCache, radius: float = None):
        self.enricher = enricher
        self.cache = cache
        self.radius = radius if radius is not None else settings.CATEGORY_SEARCH_RADIUS_M

    def supports(self, search_type):
        return search_type == SearchType.CATEGORY

    async def search(self, context: SearchContext) -> list[PlaceItem]:
        logger.debug(
            f"Category search: category={context.category} lat={context.lat} lng={context.lng}"
        )
        try:
            items = await self._search(context)
        except Exception as e:
            logger.error(f"Category search failed: category={context.category} error={e}")
            raise
        logger.debug(f"Category search done: {len(items)} results")
        return items

    async def _search(self, context):
        category, lat, lng = context.category, context.lat, context.lng

        payload = await self.cache.get(category, lat, lng)
        if payload is not None:
            # Hit, possibly an empty list: no store or enrichment calls
            bookmarks = await self.enricher.bookmarks(
                context.user_id, [c.place_id for c in payload]
            )
        else:
            payload, bookmarks = await self.enricher.retrieve_category(
                category, lat, lng, self.radius, context.user_id
            )
            await self.cache.put(category, lat, lng, payload)

        if not payload:
            return []
        items = self.enricher.items_from_payload(payload, bookmarks)
        return ranker.rank_by_distance(items, {c.place_id: c.distance for c in payload})
