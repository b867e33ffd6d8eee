import logging
from elasticsearch import AsyncElasticsearch
from place_search.core.config import settings

logger = logging.getLogger(__name__)

PLACE_MAPPINGS = {
    "properties": {
        "name": {"type": "text", "analyzer": "standard"},
        "category": {"type": "keyword"},
        "road_address": {"type": "text", "analyzer": "standard"},
        "lot_address": {"type": "text", "analyzer": "standard"},
        "image_url": {"type": "keyword", "index": False},
        "description": {"type": "text", "analyzer": "standard"},
        "phone": {"type": "keyword", "index": False},
        "keywords": {"type": "keyword"},
        "location": {"type": "geo_point"},
    }
}

MOMENT_MAPPINGS = {
    "properties": {
        "place_id": {"type": "long"},
        "user_id": {"type": "long"},
        "is_public": {"type": "boolean"},
        "created_at": {"type": "date"},
    }
}

BOOKMARK_MAPPINGS = {
    "properties": {
        "place_id": {"type": "long"},
        "user_id": {"type": "long"},
        "created_at": {"type": "date"},
    }
}


def index_mappings() -> dict:
    return {
        settings.ES_PLACE_INDEX: PLACE_MAPPINGS,
        settings.ES_MOMENT_INDEX: MOMENT_MAPPINGS,
        settings.ES_BOOKMARK_INDEX: BOOKMARK_MAPPINGS,
    }


async def ensure_indices(client: AsyncElasticsearch) -> list[str]:
    """Create any missing search index. Returns the names that were created."""
    created = []
    for name, mappings in index_mappings().items():
        if await client.indices.exists(index=name):
            continue
        await client.indices.create(index=name, mappings=mappings)
        logger.info(f"Created index {name}")
        created.append(name)
    return created
