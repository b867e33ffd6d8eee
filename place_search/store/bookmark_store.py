import logging
from elasticsearch import ApiError, AsyncElasticsearch, TransportError
from place_search.core.config import settings
from place_search.core.exceptions import UpstreamFailure

logger = logging.getLogger(__name__)


class BookmarkStore:
    def __init__(self, client: AsyncElasticsearch = None, index: str = None):
        self.client = client or AsyncElasticsearch(settings.ES_HOST)
        self.index = index or settings.ES_BOOKMARK_INDEX

    async def get_bookmark_status_map(
        self, user_id: int | None, place_ids: list[int]
    ) -> dict[int, bool]:
        # Anonymous requesters have no bookmarks
        if user_id is None or not place_ids:
            return {}
        try:
            resp = await self.client.search(
                index=self.index,
                query={
                    "bool": {
                        "filter": [
                            {"term": {"user_id": user_id}},
                            {"terms": {"place_id": place_ids}},
                        ]
                    }
                },
                source=["place_id"],
                size=len(place_ids),
            )
        except (ApiError, TransportError) as e:
            logger.error(f"Bookmark lookup failed for user {user_id}: {e}")
            raise UpstreamFailure("bookmark_store", "Failed to load bookmarks") from e

        bookmarked = {int(hit["_source"]["place_id"]) for hit in resp["hits"]["hits"]}
        return {pid: pid in bookmarked for pid in place_ids}
