import logging
import math
from decimal import Decimal, ROUND_HALF_UP
from pydantic import BaseModel
from typing import List, Optional
from place_search.models import Location, PlaceItem, PlaceRecord

logger = logging.getLogger(__name__)


def format_distance(distance_m: Optional[float]) -> float:
    """Metres below 1km as a whole number, otherwise km with one decimal.

    Both roundings are half-up: 999.5 -> 1000.0, 1550 -> 1.6.
    """
    if distance_m is None:
        return 0.0
    if distance_m < 1000:
        return float(math.floor(distance_m + 0.5))
    km = Decimal(str(distance_m)) / Decimal(1000)
    return float(km.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class AssemblyContext(BaseModel):
    place: PlaceRecord
    distance: Optional[float] = None
    similarity_score: Optional[float] = None
    ai_keywords: Optional[List[str]] = None
    moment_count: int = 0
    is_bookmarked: bool = False

    @property
    def has_ai_keywords(self) -> bool:
        return bool(self.ai_keywords)

    @property
    def has_distance(self) -> bool:
        return self.distance is not None

    @property
    def has_similarity_score(self) -> bool:
        return self.similarity_score is not None


class ItemRule:
    priority = 100

    def supports(self, ctx: AssemblyContext) -> bool:
        raise NotImplementedError

    def build(self, ctx: AssemblyContext) -> PlaceItem:
        place = ctx.place
        return PlaceItem(
            id=place.id,
            name=place.name,
            thumbnail=place.image_url,
            distance=format_distance(ctx.distance),
            moment_count=ctx.moment_count,
            keywords=self.keywords(ctx),
            location=Location(coordinates=[place.longitude, place.latitude]),
            is_bookmarked=ctx.is_bookmarked,
            similarity_score=self.similarity_score(ctx),
        )

    def keywords(self, ctx: AssemblyContext) -> List[str]:
        if ctx.has_ai_keywords:
            return list(ctx.ai_keywords)
        return list(ctx.place.keywords)

    def similarity_score(self, ctx: AssemblyContext) -> Optional[float]:
        return None


class AiAwareRule(ItemRule):
    """Items that came from an AI recommendation."""

    priority = 1

    def supports(self, ctx):
        return ctx.has_similarity_score or ctx.has_ai_keywords

    def similarity_score(self, ctx):
        return ctx.similarity_score


class DistanceAwareRule(ItemRule):
    priority = 2

    def supports(self, ctx):
        return ctx.has_distance and not ctx.has_similarity_score


class GenericRule(ItemRule):
    priority = 999

    def supports(self, ctx):
        return True


class PlaceItemAssembler:
    def __init__(self, rules: List[ItemRule] = None):
        rules = rules if rules is not None else [AiAwareRule(), DistanceAwareRule(), GenericRule()]
        self.rules = sorted(rules, key=lambda r: r.priority)

    def create(
        self,
        place: PlaceRecord,
        distance: float = None,
        similarity_score: float = None,
        ai_keywords: List[str] = None,
        moment_count: int = 0,
        is_bookmarked: bool = False,
    ) -> PlaceItem:
        ctx = AssemblyContext(
            place=place,
            distance=distance,
            similarity_score=similarity_score,
            ai_keywords=ai_keywords,
            moment_count=moment_count,
            is_bookmarked=is_bookmarked,
        )
        for rule in self.rules:
            if rule.supports(ctx):
                logger.debug(f"Assembling place {place.id} with {type(rule).__name__}")
                return rule.build(ctx)
        raise LookupError(f"No item rule accepts place {place.id}")


assembler = PlaceItemAssembler()
