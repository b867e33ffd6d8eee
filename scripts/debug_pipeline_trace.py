import argparse
import asyncio
import json
import os
import sys

# Add the project root directory to the python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from place_search.cache.search_cache import InMemorySearchCache
from place_search.core.config import settings
from place_search.core.exceptions import PlaceSearchError
from place_search.search.context import build_search_context
from place_search.search.service import build_search_service


# Setup logging to file and console
class Tee(object):
    def __init__(self, *files):
        self.files = files

    def write(self, obj):
        for f in self.files:
            f.write(obj)
            f.flush()

    def flush(self):
        for f in self.files:
            f.flush()


async def trace_search(service, query, category, lat, lng, user_id, dev_token):
    print(f"\n{'='*60}", flush=True)
    print(f"QUERY: {query!r} CATEGORY: {category!r} AT ({lat}, {lng})", flush=True)
    print(f"{'='*60}", flush=True)

    # 1. Validation & dispatch
    print("\n--- [Phase 1] Context & Strategy ---", flush=True)
    context = build_search_context(query, category, lat, lng, user_id, dev_token)
    strategy = service.dispatcher.get_strategy(context.search_type)
    print(f"Search type: {context.search_type.value}", flush=True)
    print(f"Strategy: {type(strategy).__name__}", flush=True)

    # 2. AI answer (query path only), fetched once and reused for ranking
    ai_response = None
    if context.query:
        print("\n--- [Phase 2] AI Recommendation ---", flush=True)
        ai_response = await strategy.ai_client.recommend_places(
            context.query, context.dev_token
        )
        print(
            json.dumps(ai_response.model_dump(), indent=2, ensure_ascii=False),
            flush=True,
        )

    # 3. Ranked results from the same answer
    print("\n--- [Phase 3] Ranked Results ---", flush=True)
    if ai_response is not None:
        places = await strategy.process_ai_response(ai_response, context)
    else:
        places = await strategy.search(context)
    for i, p in enumerate(places):
        score = "-" if p.similarity_score is None else f"{p.similarity_score:.4f}"
        print(f"#{i+1} ID: {p.id} | {p.name}", flush=True)
        print(f"    Distance: {p.distance} | Score: {score}", flush=True)
        print(f"    Keywords: {p.keywords}", flush=True)
        print(
            f"    Moments: {p.moment_count} | Bookmarked: {p.is_bookmarked}",
            flush=True,
        )
    print(f"Total: {len(places)}", flush=True)


async def main(args):
    # Trace runs never touch the shared cache
    service = build_search_service(cache=InMemorySearchCache())
    try:
        await trace_search(
            service,
            args.query,
            args.category,
            args.lat,
            args.lng,
            args.user_id,
            args.dev_token,
        )
    except PlaceSearchError as e:
        print(f"\n[{e.code}] {e.message}", flush=True)
    finally:
        await service.place_store.client.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Trace one place search end to end")
    parser.add_argument("--query")
    parser.add_argument("--category")
    parser.add_argument("--lat", type=float, default=37.4979)
    parser.add_argument("--lng", type=float, default=127.0276)
    parser.add_argument("--user-id", type=int)
    parser.add_argument("--dev-token")
    args = parser.parse_args()

    os.makedirs(settings.LOG_DIR, exist_ok=True)
    f = open(settings.TRACE_LOG_PATH, "a")
    sys.stdout = Tee(sys.stdout, f)

    asyncio.run(main(args))
