import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Application
    APP_ENV = os.getenv("APP_ENV", "local")
    APP_PORT = int(os.getenv("APP_PORT", "8080"))

    # Logging
    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    APP_LOG_FILENAME = os.getenv("APP_LOG_FILENAME", "place_search.log")
    TRACE_LOG_FILENAME = os.getenv("TRACE_LOG_FILENAME", "pipeline_trace.log")
    TRACE_LOG_PATH = os.path.join(LOG_DIR, TRACE_LOG_FILENAME)

    # Elasticsearch
    ES_HOST = os.getenv("ES_HOST", "http://localhost:9200")
    ES_PLACE_INDEX = os.getenv("ES_PLACE_INDEX", "place_v1")
    ES_MOMENT_INDEX = os.getenv("ES_MOMENT_INDEX", "moment_v1")
    ES_BOOKMARK_INDEX = os.getenv("ES_BOOKMARK_INDEX", "place_bookmark_v1")
    ES_MAX_RESULTS = int(os.getenv("ES_MAX_RESULTS", "100"))
    ES_CATEGORY_AGG_SIZE = int(os.getenv("ES_CATEGORY_AGG_SIZE", "200"))

    # AI recommendation service
    AI_SERVICE_URL = os.getenv("AI_SERVICE_URL", "http://localhost:8001")
    AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "10"))
    DEV_TOKEN_HEADER = os.getenv("DEV_TOKEN_HEADER", "X-Dev-Token")

    # Search radii (metres). The two paths are tuned independently.
    AI_SEARCH_RADIUS_M = float(os.getenv("AI_SEARCH_RADIUS_M", "1000"))
    CATEGORY_SEARCH_RADIUS_M = float(os.getenv("CATEGORY_SEARCH_RADIUS_M", "1000"))

    # Cache
    CACHE_BACKEND = os.getenv("CACHE_BACKEND", "redis")
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    CACHE_KEY_PREFIX = os.getenv("CACHE_KEY_PREFIX", "dolphin")
    CACHE_GRID_SCALE = int(os.getenv("CACHE_GRID_SCALE", "100"))
    CATEGORY_SEARCH_TTL_SECONDS = int(os.getenv("CATEGORY_SEARCH_TTL_SECONDS", "1800"))
    CATEGORIES_TTL_SECONDS = int(os.getenv("CATEGORIES_TTL_SECONDS", "86400"))


settings = Settings()
