import logging
from place_search.core.exceptions import UnsupportedSearchType
from place_search.models import SearchType
from place_search.search.strategies.base import PlaceSearchStrategy

logger = logging.getLogger(__name__)


class StrategyDispatcher:
    """Picks the search strategy for a request type.

    Strategies are tried in ascending priority; the sort is stable, so equal
    priorities keep their declaration order.
    """

    def __init__(self, strategies: list[PlaceSearchStrategy]):
        self.strategies = sorted(strategies, key=lambda s: s.priority)
        logger.info(
            "Registered search strategies: "
            + ", ".join(type(s).__name__ for s in self.strategies)
        )

    def get_strategy(self, search_type: SearchType) -> PlaceSearchStrategy:
        for strategy in self.strategies:
            if strategy.supports(search_type):
                return strategy
        raise UnsupportedSearchType(f"Unsupported search type: {search_type.value}")
