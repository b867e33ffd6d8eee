import pytest
from place_search.cache.search_cache import InMemorySearchCache
from place_search.models import PlaceAiResponse, PlaceRecord, PlaceWithDistance
from place_search.search.dispatcher import StrategyDispatcher
from place_search.search.enrichment import PlaceEnricher
from place_search.search.service import PlaceSearchService
from place_search.search.strategies.ai_query import AiQuerySearchStrategy
from place_search.search.strategies.category import CategorySearchStrategy

USER_LAT = 37.4979
USER_LNG = 127.0276


def make_place(pid, distance, category="cafe", keywords=None, name=None):
    return {
        "id": pid,
        "name": name or f"Place {pid}",
        "category": category,
        "image_url": f"https://img.example.com/{pid}.jpg",
        "distance": distance,
        "latitude": USER_LAT + pid * 0.001,
        "longitude": USER_LNG + pid * 0.001,
        "keywords": keywords if keywords is not None else [f"stored-{pid}"],
    }


class FakePlaceStore:
    def __init__(self, places=()):
        self.places = {p["id"]: p for p in places}
        self.calls = []

    def _projection(self, p):
        return PlaceWithDistance(
            id=p["id"],
            name=p["name"],
            category=p["category"],
            image_url=p["image_url"],
            distance=p["distance"],
            latitude=p["latitude"],
            longitude=p["longitude"],
        )

    async def resolve_by_ids_within_radius(self, place_ids, lat, lng, radius):
        self.calls.append(("by_ids_within_radius", list(place_ids), radius))
        found = [
            self.places[pid]
            for pid in place_ids
            if pid in self.places and self.places[pid]["distance"] <= radius
        ]
        return [self._projection(p) for p in sorted(found, key=lambda p: p["distance"])]

    async def resolve_by_category_within_radius(self, category, lat, lng, radius):
        self.calls.append(("by_category_within_radius", category, radius))
        found = [
            p
            for p in self.places.values()
            if p["category"] == category and p["distance"] <= radius
        ]
        return [self._projection(p) for p in sorted(found, key=lambda p: p["distance"])]

    async def resolve_by_ids_with_keywords(self, place_ids):
        self.calls.append(("by_ids_with_keywords", list(place_ids)))
        return [
            PlaceRecord(
                id=p["id"],
                name=p["name"],
                category=p["category"],
                image_url=p["image_url"],
                latitude=p["latitude"],
                longitude=p["longitude"],
                keywords=p["keywords"],
                road_address=p.get("road_address"),
                description=p.get("description"),
                phone=p.get("phone"),
            )
            for pid in place_ids
            if (p := self.places.get(pid)) is not None
        ]

    async def find_distinct_categories(self):
        self.calls.append(("distinct_categories",))
        return sorted({p["category"] for p in self.places.values()})


class FakeMomentStore:
    def __init__(self, counts=None):
        self.counts = counts or {}
        self.calls = []

    async def count_public_moments_by_place_ids(self, place_ids):
        self.calls.append(list(place_ids))
        return {pid: self.counts[pid] for pid in place_ids if pid in self.counts}


class FakeBookmarkStore:
    def __init__(self, bookmarks=None):
        # user_id -> set of place ids
        self.bookmarks = bookmarks or {}
        self.calls = []

    async def get_bookmark_status_map(self, user_id, place_ids):
        self.calls.append((user_id, list(place_ids)))
        if user_id is None or not place_ids:
            return {}
        mine = self.bookmarks.get(user_id, set())
        return {pid: pid in mine for pid in place_ids}


class FakeAiClient:
    def __init__(self, response=None, error=None):
        self.response = response or PlaceAiResponse()
        self.error = error
        self.calls = []

    async def recommend_places(self, query, dev_token=None):
        self.calls.append((query, dev_token))
        if self.error is not None:
            raise self.error
        return self.response


class Pipeline:
    """Search service wired over in-memory collaborators."""

    def __init__(self, places=(), counts=None, bookmarks=None, ai_response=None, ai_error=None):
        self.place_store = FakePlaceStore(places)
        self.moment_store = FakeMomentStore(counts)
        self.bookmark_store = FakeBookmarkStore(bookmarks)
        self.ai_client = FakeAiClient(ai_response, ai_error)
        self.cache = InMemorySearchCache()
        self.enricher = PlaceEnricher(self.place_store, self.moment_store, self.bookmark_store)
        self.ai_strategy = AiQuerySearchStrategy(self.ai_client, self.enricher, radius=1000.0)
        self.category_strategy = CategorySearchStrategy(self.enricher, self.cache, radius=2000.0)
        self.service = PlaceSearchService(
            StrategyDispatcher([self.ai_strategy, self.category_strategy]),
            self.enricher,
            self.cache,
        )

    @property
    def collaborator_calls(self):
        return (
            len(self.place_store.calls)
            + len(self.moment_store.calls)
            + len(self.bookmark_store.calls)
            + len(self.ai_client.calls)
        )


@pytest.fixture
def pipeline_factory():
    return Pipeline
