import logging
from elasticsearch import ApiError, AsyncElasticsearch, TransportError
from place_search.core.config import settings
from place_search.core.exceptions import UpstreamFailure

logger = logging.getLogger(__name__)


class MomentStore:
    def __init__(self, client: AsyncElasticsearch = None, index: str = None):
        self.client = client or AsyncElasticsearch(settings.ES_HOST)
        self.index = index or settings.ES_MOMENT_INDEX

    async def count_public_moments_by_place_ids(
        self, place_ids: list[int]
    ) -> dict[int, int]:
        """Public moment count per place. Places without moments are absent."""
        if not place_ids:
            return {}
        try:
            resp = await self.client.search(
                index=self.index,
                size=0,
                query={
                    "bool": {
                        "filter": [
                            {"terms": {"place_id": place_ids}},
                            {"term": {"is_public": True}},
                        ]
                    }
                },
                aggs={
                    "by_place": {
                        "terms": {"field": "place_id", "size": len(place_ids)}
                    }
                },
            )
        except (ApiError, TransportError) as e:
            logger.error(f"Moment count aggregation failed: {e}")
            raise UpstreamFailure("moment_store", "Failed to count moments") from e

        buckets = resp["aggregations"]["by_place"]["buckets"]
        return {int(b["key"]): b["doc_count"] for b in buckets}
