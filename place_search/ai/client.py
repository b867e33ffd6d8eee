import asyncio
import aiohttp
import logging
from pydantic import ValidationError
from place_search.core.config import settings
from place_search.core.exceptions import UpstreamFailure
from place_search.core.logging_config import mask_token
from place_search.models import PlaceAiResponse

logger = logging.getLogger(__name__)


class PlaceAiClient:
    """Client of the place recommendation service.

    The service answers either with ranked `recommendations`
    (`id`, `similarity_score`, `keyword`) or with a single `place_category`
    hint. Any transport error, non-200 status or malformed body is raised as
    UpstreamFailure; callers never get a silent empty answer for a failed call.
    """

    def __init__(self, base_url: str = None, timeout_seconds: float = None):
        self.base_url = (base_url or settings.AI_SERVICE_URL).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(
            total=timeout_seconds or settings.AI_TIMEOUT_SECONDS
        )

    @property
    def recommend_url(self) -> str:
        return f"{self.base_url}/place/recommend"

    async def recommend_places(
        self, query: str, dev_token: str = None
    ) -> PlaceAiResponse:
        payload = {"user_query": query}
        headers = {"Content-Type": "application/json"}
        if dev_token:
            headers[settings.DEV_TOKEN_HEADER] = dev_token

        logger.info(
            f"Requesting AI recommendation: query={query!r} dev_token={mask_token(dev_token)}"
        )
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(
                    self.recommend_url, json=payload, headers=headers
                ) as resp:
                    if resp.status != 200:
                        error_text = await resp.text()
                        logger.error(f"AI Service Error: {resp.status} - {error_text}")
                        raise UpstreamFailure(
                            "ai_service", f"AI service returned status {resp.status}"
                        )
                    data = await resp.json()
        except asyncio.TimeoutError as e:
            logger.error(f"AI Service timed out after {self.timeout.total}s")
            raise UpstreamFailure("ai_service", "AI service timed out") from e
        except aiohttp.ClientError as e:
            logger.error(f"Failed to connect to AI Service: {e}")
            raise UpstreamFailure("ai_service", "AI service connection failed") from e
        except ValueError as e:
            logger.error(f"AI Service returned invalid JSON: {e}")
            raise UpstreamFailure("ai_service", "Malformed AI service response") from e

        try:
            return PlaceAiResponse.model_validate(data)
        except ValidationError as e:
            logger.error(f"Malformed AI Service response: {e}")
            raise UpstreamFailure("ai_service", "Malformed AI service response") from e
