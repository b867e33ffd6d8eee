from place_search.models import PlaceItem


class Ranker:
    def rank_by_similarity(
        self, items: list[PlaceItem], distances: dict[int, float] = None
    ) -> list[PlaceItem]:
        """AI path: highest similarity first.

        Items without a score go last. Equal scores fall back to the nearer
        place, then to the incoming order.
        """
        distances = distances or {}

        def sort_key(item):
            score = item.similarity_score
            return (
                score is None,
                -(score or 0.0),
                distances.get(item.id, float("inf")),
            )

        return sorted(items, key=sort_key)

    def rank_by_distance(
        self, items: list[PlaceItem], distances: dict[int, float]
    ) -> list[PlaceItem]:
        """Category path: nearest first by raw metres.

        Formatted distances mix metres and km, so they are never compared.
        The sort is stable and the store order is kept on ties.
        """
        return sorted(items, key=lambda item: distances.get(item.id, float("inf")))


ranker = Ranker()
