import logging
import os

from place_search.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str = None, log_file: str = None):
    """Console + file logging for the API process and scripts."""
    level = level or settings.LOG_LEVEL
    if log_file is None:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        log_file = os.path.join(settings.LOG_DIR, settings.APP_LOG_FILENAME)

    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )
    # elastic_transport logs every request at INFO
    logging.getLogger("elastic_transport").setLevel(logging.WARNING)


def mask_token(token: str) -> str:
    if not token:
        return "null"
    return token[: min(4, len(token))] + "***"
