import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Optional
from place_search.core.config import settings
from place_search.core.exceptions import PlaceSearchError
from place_search.core.logging_config import mask_token, setup_logging
from place_search.models import (
    ApiResponse,
    PlaceCategoryResponse,
    PlaceDetail,
    PlaceSearchResponse,
)
from place_search.search.service import PlaceSearchService, build_search_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    service = build_search_service()
    app.state.search_service = service
    logger.info(f"Place search ready (env={settings.APP_ENV}, es={settings.ES_HOST})")
    yield
    await service.place_store.client.close()
    await service.cache.close()


app = FastAPI(title="Place Search Service", version="1.0", lifespan=lifespan)


def get_search_service(request: Request) -> PlaceSearchService:
    return request.app.state.search_service


@app.exception_handler(PlaceSearchError)
async def place_search_error_handler(request: Request, exc: PlaceSearchError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ApiResponse(message=exc.message, code=exc.code).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content=ApiResponse(message="Invalid parameter", code="INVALID_PARAMETER").model_dump(),
    )


async def _search_response(service, query, category, lat, lng, user_id, dev_token=None):
    places = await service.search(
        query=query,
        category=category,
        lat=lat,
        lng=lng,
        user_id=user_id,
        dev_token=dev_token,
    )
    return ApiResponse[PlaceSearchResponse](
        message="get_place_success",
        data=PlaceSearchResponse(total=len(places), places=places),
    )


@app.get(
    "/api/v1/places/search",
    response_model=ApiResponse[PlaceSearchResponse],
    response_model_exclude_none=True,
)
async def search_places(
    query: Optional[str] = None,
    category: Optional[str] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    x_user_id: Optional[int] = Header(default=None),
    service: PlaceSearchService = Depends(get_search_service),
):
    return await _search_response(service, query, category, lat, lng, x_user_id)


@app.get(
    "/api/v1/places/search/dev",
    response_model=ApiResponse[PlaceSearchResponse],
    response_model_exclude_none=True,
)
async def search_places_for_dev(
    query: Optional[str] = None,
    category: Optional[str] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    x_user_id: Optional[int] = Header(default=None),
    x_dev_token: Optional[str] = Header(default=None),
    service: PlaceSearchService = Depends(get_search_service),
):
    # Only served in the dev environment
    if settings.APP_ENV != "dev":
        raise HTTPException(status_code=404, detail="Not Found")
    logger.info(f"DEV search with token: {mask_token(x_dev_token)}")
    return await _search_response(
        service, query, category, lat, lng, x_user_id, x_dev_token
    )


@app.get(
    "/api/v1/places/categories",
    response_model=ApiResponse[PlaceCategoryResponse],
    response_model_exclude_none=True,
)
async def get_categories(service: PlaceSearchService = Depends(get_search_service)):
    categories = await service.list_categories()
    return ApiResponse[PlaceCategoryResponse](
        message="get_categories_success",
        data=PlaceCategoryResponse(categories=categories),
    )


# Declared after the fixed /places/* paths so they take precedence
@app.get(
    "/api/v1/places/{place_id}",
    response_model=ApiResponse[PlaceDetail],
    response_model_exclude_none=True,
)
async def get_place_detail(
    place_id: int,
    x_user_id: Optional[int] = Header(default=None),
    service: PlaceSearchService = Depends(get_search_service),
):
    detail = await service.get_place_detail(place_id, x_user_id)
    return ApiResponse[PlaceDetail](message="get_place_detail_success", data=detail)


@app.get("/health")
async def health():
    return {"status": "ok", "elasticsearch": settings.ES_HOST, "ai_service": settings.AI_SERVICE_URL}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.APP_PORT)
