import logging
from place_search.ai.client import PlaceAiClient
from place_search.core.config import settings
from place_search.models import PlaceAiResponse, PlaceItem, SearchContext, SearchType
from place_search.search.enrichment import PlaceEnricher
from place_search.search.ranking import ranker
from place_search.search.strategies.base import PlaceSearchStrategy

logger = logging.getLogger(__name__)


class AiQuerySearchStrategy(PlaceSearchStrategy):
    """Free-text search through the recommendation service.

    Recommended places are resolved around the requester and ranked by
    similarity. When the service only suggests a category, that category is
    searched directly (uncached). A failed AI call propagates; an answer with
    neither recommendations nor a category is an empty result.
    """

    priority = 1

    def __init__(self, ai_client: PlaceAiClient, enricher: PlaceEnricher, radius: float = None):
        self.ai_client = ai_client
        self.enricher = enricher
        self.radius = radius if radius is not None else settings.AI_SEARCH_RADIUS_M

    def supports(self, search_type):
        return search_type == SearchType.AI_QUERY

    async def search(self, context: SearchContext) -> list[PlaceItem]:
        logger.debug(f"AI search: query={context.query!r}")
        ai_response = await self.ai_client.recommend_places(
            context.query, context.dev_token
        )
        items = await self.process_ai_response(ai_response, context)
        logger.debug(f"AI search done: {len(items)} results")
        return items

    async def process_ai_response(
        self, ai_response: PlaceAiResponse, context: SearchContext
    ) -> list[PlaceItem]:
        if ai_response.recommendations:
            recommendations = ai_response.valid_recommendations()
            if not recommendations:
                # A non-empty list never falls back to the category hint
                logger.info(f"AI recommendations had no usable entry for query={context.query!r}")
                return []
            return await self._from_recommendations(recommendations, context)

        category = (ai_response.place_category or "").strip()
        if category:
            logger.debug(f"AI suggested category: {category}")
            return await self._from_category(category, context)

        logger.info(f"AI found no relevant place for query={context.query!r}")
        return []

    async def _from_recommendations(self, recommendations, context):
        place_ids = [rec.id for rec in recommendations]
        scores = {
            rec.id: rec.similarity_score
            for rec in recommendations
            if rec.similarity_score is not None
        }
        ai_keywords = {rec.id: rec.keywords for rec in recommendations if rec.keywords}

        nearby = await self.enricher.place_store.resolve_by_ids_within_radius(
            place_ids, context.lat, context.lng, self.radius
        )
        if not nearby:
            return []

        found_ids = [p.id for p in nearby]
        enrichment = await self.enricher.enrich(found_ids, context.user_id)

        items = []
        for place in nearby:
            record = enrichment.records.get(place.id)
            if record is None:
                logger.warning(f"Recommended place {place.id} has no place record, skipping")
                continue
            items.append(
                self.enricher.assembler.create(
                    record,
                    distance=place.distance,
                    similarity_score=scores.get(place.id),
                    ai_keywords=ai_keywords.get(place.id),
                    moment_count=enrichment.moment_counts.get(place.id, 0),
                    is_bookmarked=enrichment.bookmarks.get(place.id, False),
                )
            )

        # Recommendation order is the last tie-break
        rank_order = {pid: i for i, pid in enumerate(place_ids)}
        items.sort(key=lambda item: rank_order[item.id])
        return ranker.rank_by_similarity(items, {p.id: p.distance for p in nearby})

    async def _from_category(self, category, context):
        payload, bookmarks = await self.enricher.retrieve_category(
            category, context.lat, context.lng, self.radius, context.user_id
        )
        items = self.enricher.items_from_payload(payload, bookmarks)
        return ranker.rank_by_distance(items, {c.place_id: c.distance for c in payload})
