from enum import Enum
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


class SearchType(str, Enum):
    AI_QUERY = "AI_QUERY"
    CATEGORY = "CATEGORY"


class SearchContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: Optional[str] = None
    category: Optional[str] = None
    lat: float
    lng: float
    user_id: Optional[int] = None
    dev_token: Optional[str] = None

    @property
    def search_type(self) -> SearchType:
        if self.query:
            return SearchType.AI_QUERY
        return SearchType.CATEGORY


# AI recommendation service payloads


class PlaceRecommendation(BaseModel):
    id: Optional[int] = None
    similarity_score: Optional[float] = None
    keywords: Optional[List[str]] = Field(
        default=None, validation_alias=AliasChoices("keyword", "keywords")
    )


class PlaceAiResponse(BaseModel):
    recommendations: Optional[List[Optional[PlaceRecommendation]]] = None
    place_category: Optional[str] = None

    def valid_recommendations(self) -> List[PlaceRecommendation]:
        """Drop null entries and entries without an id; first occurrence of an id wins."""
        seen = set()
        valid = []
        for rec in self.recommendations or []:
            if rec is None or rec.id is None or rec.id in seen:
                continue
            seen.add(rec.id)
            valid.append(rec)
        return valid


# Store projections


class PlaceWithDistance(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    category: Optional[str] = None
    road_address: Optional[str] = None
    lot_address: Optional[str] = None
    image_url: Optional[str] = None
    distance: Optional[float] = None
    latitude: float
    longitude: float


class PlaceRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    category: Optional[str] = None
    road_address: Optional[str] = None
    lot_address: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    phone: Optional[str] = None
    latitude: float
    longitude: float
    keywords: List[str] = []

    @classmethod
    def from_projection(cls, place: PlaceWithDistance, keywords: List[str] = None):
        return cls(
            id=place.id,
            name=place.name,
            category=place.category,
            road_address=place.road_address,
            lot_address=place.lot_address,
            image_url=place.image_url,
            latitude=place.latitude,
            longitude=place.longitude,
            keywords=keywords or [],
        )


class CachedPlace(BaseModel):
    """Bookmark-agnostic category search entry, safe to share across requesters."""

    model_config = ConfigDict(frozen=True)

    place_id: int
    place_name: str
    thumbnail: Optional[str] = None
    distance: Optional[float] = None
    latitude: float
    longitude: float
    category: Optional[str] = None
    keywords: List[str] = []
    moment_count: int = 0

    def to_record(self) -> PlaceRecord:
        return PlaceRecord(
            id=self.place_id,
            name=self.place_name,
            category=self.category,
            image_url=self.thumbnail,
            latitude=self.latitude,
            longitude=self.longitude,
            keywords=list(self.keywords),
        )


# API responses


class Location(BaseModel):
    type: str = "Point"
    coordinates: List[float]


class PlaceItem(BaseModel):
    id: int
    name: str
    thumbnail: Optional[str] = None
    distance: Optional[float] = None
    moment_count: int = 0
    keywords: List[str] = []
    location: Location
    is_bookmarked: bool = False
    similarity_score: Optional[float] = None


class PlaceDetail(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    thumbnail: Optional[str] = None
    location: Location
    keywords: List[str] = []
    description: Optional[str] = None
    phone: Optional[str] = None
    moment_count: int = 0
    # None for anonymous requesters
    is_bookmarked: Optional[bool] = None


class PlaceSearchResponse(BaseModel):
    total: int
    places: List[PlaceItem]


class PlaceCategoryResponse(BaseModel):
    categories: List[str]


class ApiResponse(BaseModel, Generic[T]):
    message: str
    data: Optional[T] = None
    code: Optional[str] = None
