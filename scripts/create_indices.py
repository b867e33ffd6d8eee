import asyncio
import logging
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from elasticsearch import AsyncElasticsearch
from place_search.core.config import settings
from place_search.store.indices import ensure_indices

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main():
    es = AsyncElasticsearch(settings.ES_HOST)
    try:
        created = await ensure_indices(es)
    finally:
        await es.close()

    if created:
        logger.info(f"Created indices: {', '.join(created)}")
    else:
        logger.info("All indices already exist.")


if __name__ == "__main__":
    asyncio.run(main())
