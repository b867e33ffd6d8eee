from place_search.models import PlaceItem, SearchContext, SearchType


class PlaceSearchStrategy:
    # Lower runs first
    priority = 100

    def supports(self, search_type: SearchType) -> bool:
        raise NotImplementedError

    async def search(self, context: SearchContext) -> list[PlaceItem]:
        raise NotImplementedError
