import asyncio
import logging
from dataclasses import dataclass, field
from place_search.models import CachedPlace, PlaceItem, PlaceRecord
from place_search.search.assembler import PlaceItemAssembler, assembler as default_assembler
from place_search.store.bookmark_store import BookmarkStore
from place_search.store.moment_store import MomentStore
from place_search.store.place_store import PlaceStore

logger = logging.getLogger(__name__)


@dataclass
class Enrichment:
    records: dict[int, PlaceRecord] = field(default_factory=dict)
    moment_counts: dict[int, int] = field(default_factory=dict)
    bookmarks: dict[int, bool] = field(default_factory=dict)


class PlaceEnricher:
    """Batch lookups shared by the search strategies.

    Lookups for one id batch are independent of each other and run
    concurrently; the first failure propagates and no partial result is
    returned.
    """

    def __init__(
        self,
        place_store: PlaceStore,
        moment_store: MomentStore,
        bookmark_store: BookmarkStore,
        assembler: PlaceItemAssembler = None,
    ):
        self.place_store = place_store
        self.moment_store = moment_store
        self.bookmark_store = bookmark_store
        self.assembler = assembler or default_assembler

    async def enrich(self, place_ids: list[int], user_id: int | None) -> Enrichment:
        records, moment_counts, bookmarks = await asyncio.gather(
            self.place_store.resolve_by_ids_with_keywords(place_ids),
            self.moment_store.count_public_moments_by_place_ids(place_ids),
            self.bookmark_store.get_bookmark_status_map(user_id, place_ids),
        )
        return Enrichment(
            records={r.id: r for r in records},
            moment_counts=moment_counts,
            bookmarks=bookmarks,
        )

    async def bookmarks(self, user_id: int | None, place_ids: list[int]) -> dict[int, bool]:
        if not place_ids:
            return {}
        return await self.bookmark_store.get_bookmark_status_map(user_id, place_ids)

    async def retrieve_category(
        self, category: str, lat: float, lng: float, radius: float, user_id: int | None
    ) -> tuple[list[CachedPlace], dict[int, bool]]:
        """Category places around a point as a bookmark-agnostic payload.

        Returns the payload in store order (nearest first) together with the
        requester's bookmark map, which must never be stored with it.
        """
        places = await self.place_store.resolve_by_category_within_radius(
            category, lat, lng, radius
        )
        if not places:
            return [], {}

        place_ids = [p.id for p in places]
        enrichment = await self.enrich(place_ids, user_id)

        payload = []
        for place in places:
            record = enrichment.records.get(place.id)
            payload.append(
                CachedPlace(
                    place_id=place.id,
                    place_name=place.name,
                    thumbnail=place.image_url,
                    distance=place.distance,
                    latitude=place.latitude,
                    longitude=place.longitude,
                    category=category,
                    keywords=record.keywords if record else [],
                    moment_count=enrichment.moment_counts.get(place.id, 0),
                )
            )
        return payload, enrichment.bookmarks

    def items_from_payload(
        self, payload: list[CachedPlace], bookmarks: dict[int, bool]
    ) -> list[PlaceItem]:
        return [
            self.assembler.create(
                cached.to_record(),
                distance=cached.distance,
                moment_count=cached.moment_count,
                is_bookmarked=bookmarks.get(cached.place_id, False),
            )
            for cached in payload
        ]
