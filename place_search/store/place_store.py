import logging
from elasticsearch import ApiError, AsyncElasticsearch, TransportError
from geopy.distance import geodesic
from place_search.core.config import settings
from place_search.core.exceptions import UpstreamFailure
from place_search.models import PlaceRecord, PlaceWithDistance

logger = logging.getLogger(__name__)


class PlaceStore:
    """Geospatial place lookups over the place index.

    Place documents carry `name`, `category`, `road_address`, `lot_address`,
    `image_url`, `description`, `phone`, `keywords` and a `location` geo_point;
    the document id is the numeric place id.
    """

    def __init__(self, client: AsyncElasticsearch = None, index: str = None):
        self.client = client or AsyncElasticsearch(settings.ES_HOST)
        self.index = index or settings.ES_PLACE_INDEX

    async def resolve_by_ids_within_radius(
        self, place_ids: list[int], lat: float, lng: float, radius: float
    ) -> list[PlaceWithDistance]:
        if not place_ids:
            return []
        filters = [
            {"ids": {"values": [str(pid) for pid in place_ids]}},
            self._geo_filter(lat, lng, radius),
        ]
        return await self._search_within_radius(filters, lat, lng, len(place_ids))

    async def resolve_by_category_within_radius(
        self, category: str, lat: float, lng: float, radius: float
    ) -> list[PlaceWithDistance]:
        """Places of a category around (lat, lng), nearest first."""
        filters = [
            {"term": {"category": category}},
            self._geo_filter(lat, lng, radius),
        ]
        return await self._search_within_radius(
            filters, lat, lng, settings.ES_MAX_RESULTS
        )

    async def resolve_by_ids_with_keywords(
        self, place_ids: list[int]
    ) -> list[PlaceRecord]:
        if not place_ids:
            return []
        try:
            resp = await self.client.mget(
                index=self.index, ids=[str(pid) for pid in place_ids]
            )
        except (ApiError, TransportError) as e:
            logger.error(f"Place mget failed: {e}")
            raise UpstreamFailure("place_store", "Failed to resolve places") from e

        records = []
        for doc in resp["docs"]:
            if not doc.get("found"):
                continue
            if not doc["_source"].get("name"):
                logger.warning(f"Skipping place {doc['_id']} without a name")
                continue
            records.append(self._parse_record(doc))
        return records

    async def find_distinct_categories(self) -> list[str]:
        try:
            resp = await self.client.search(
                index=self.index,
                size=0,
                aggs={
                    "categories": {
                        "terms": {
                            "field": "category",
                            "size": settings.ES_CATEGORY_AGG_SIZE,
                            "order": {"_key": "asc"},
                        }
                    }
                },
            )
        except (ApiError, TransportError) as e:
            logger.error(f"Category aggregation failed: {e}")
            raise UpstreamFailure("place_store", "Failed to load categories") from e

        return [b["key"] for b in resp["aggregations"]["categories"]["buckets"]]

    def _geo_filter(self, lat, lng, radius):
        return {
            "geo_distance": {
                "distance": f"{radius}m",
                "location": {"lat": lat, "lon": lng},
            }
        }

    async def _search_within_radius(self, filters, lat, lng, size):
        try:
            resp = await self.client.search(
                index=self.index,
                query={"bool": {"filter": filters}},
                sort=[
                    {
                        "_geo_distance": {
                            "location": {"lat": lat, "lon": lng},
                            "order": "asc",
                            "unit": "m",
                        }
                    }
                ],
                size=size,
            )
        except (ApiError, TransportError) as e:
            logger.error(f"Place radius search failed: {e}")
            raise UpstreamFailure("place_store", "Failed to search places") from e

        places = []
        for hit in resp["hits"]["hits"]:
            if not hit["_source"].get("name"):
                logger.warning(f"Skipping place {hit['_id']} without a name")
                continue
            places.append(self._parse_hit(hit, lat, lng))
        # Ascending by the reported distance
        places.sort(key=lambda p: p.distance)
        return places

    def _parse_hit(self, hit, lat, lng) -> PlaceWithDistance:
        source = hit["_source"]
        location = source["location"]
        item_lat = location["lat"]
        item_lng = location["lon"]
        distance = geodesic((lat, lng), (item_lat, item_lng)).meters

        return PlaceWithDistance(
            id=int(hit["_id"]),
            name=source.get("name"),
            category=source.get("category"),
            road_address=source.get("road_address"),
            lot_address=source.get("lot_address"),
            image_url=source.get("image_url"),
            distance=distance,
            latitude=item_lat,
            longitude=item_lng,
        )

    def _parse_record(self, doc) -> PlaceRecord:
        source = doc["_source"]
        location = source["location"]
        return PlaceRecord(
            id=int(doc["_id"]),
            name=source.get("name"),
            category=source.get("category"),
            road_address=source.get("road_address"),
            lot_address=source.get("lot_address"),
            image_url=source.get("image_url"),
            description=source.get("description"),
            phone=source.get("phone"),
            latitude=location["lat"],
            longitude=location["lon"],
            keywords=source.get("keywords") or [],
        )
