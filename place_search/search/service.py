import logging
from elasticsearch import AsyncElasticsearch
from place_search.ai.client import PlaceAiClient
from place_search.cache.search_cache import SearchResultCache, build_search_cache
from place_search.core.config import settings
from place_search.core.exceptions import PlaceNotFound
from place_search.models import Location, PlaceDetail, PlaceItem
from place_search.search.context import build_search_context
from place_search.search.dispatcher import StrategyDispatcher
from place_search.search.enrichment import PlaceEnricher
from place_search.search.strategies.ai_query import AiQuerySearchStrategy
from place_search.search.strategies.category import CategorySearchStrategy
from place_search.store.bookmark_store import BookmarkStore
from place_search.store.moment_store import MomentStore
from place_search.store.place_store import PlaceStore

logger = logging.getLogger(__name__)


class PlaceSearchService:
    def __init__(
        self,
        dispatcher: StrategyDispatcher,
        enricher: PlaceEnricher,
        cache: SearchResultCache,
    ):
        self.dispatcher = dispatcher
        self.enricher = enricher
        self.cache = cache

    @property
    def place_store(self) -> PlaceStore:
        return self.enricher.place_store

    async def search(
        self,
        query: str = None,
        category: str = None,
        lat: float = None,
        lng: float = None,
        user_id: int = None,
        dev_token: str = None,
    ) -> list[PlaceItem]:
        # Validation fails before any collaborator is touched
        context = build_search_context(query, category, lat, lng, user_id, dev_token)
        strategy = self.dispatcher.get_strategy(context.search_type)
        logger.debug(
            f"Dispatching {context.search_type.value} search to {type(strategy).__name__}"
        )
        return await strategy.search(context)

    async def get_place_detail(self, place_id: int, user_id: int = None) -> PlaceDetail:
        """One place with its keywords, public moment count and the requester's bookmark.

        `is_bookmarked` is None for anonymous requesters.
        """
        logger.debug(f"Place detail: place_id={place_id} user_id={user_id}")
        enrichment = await self.enricher.enrich([place_id], user_id)
        record = enrichment.records.get(place_id)
        if record is None:
            raise PlaceNotFound(f"Place not found: {place_id}")

        return PlaceDetail(
            id=record.id,
            name=record.name,
            address=record.road_address,
            thumbnail=record.image_url,
            location=Location(coordinates=[record.longitude, record.latitude]),
            keywords=list(record.keywords),
            description=record.description,
            phone=record.phone,
            moment_count=enrichment.moment_counts.get(place_id, 0),
            is_bookmarked=enrichment.bookmarks.get(place_id) if user_id is not None else None,
        )

    async def list_categories(self) -> list[str]:
        cached = await self.cache.get_categories()
        if cached is not None:
            logger.debug(f"Categories cache hit: {len(cached)}")
            return cached

        categories = await self.place_store.find_distinct_categories()
        await self.cache.put_categories(categories)
        return categories


def build_search_service(
    es: AsyncElasticsearch = None,
    cache: SearchResultCache = None,
    ai_client: PlaceAiClient = None,
) -> PlaceSearchService:
    es = es or AsyncElasticsearch(settings.ES_HOST)
    cache = cache or build_search_cache()
    ai_client = ai_client or PlaceAiClient()

    enricher = PlaceEnricher(PlaceStore(es), MomentStore(es), BookmarkStore(es))
    dispatcher = StrategyDispatcher(
        [
            AiQuerySearchStrategy(ai_client, enricher),
            CategorySearchStrategy(enricher, cache),
        ]
    )
    return PlaceSearchService(dispatcher, enricher, cache)
