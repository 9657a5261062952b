import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from weather_activities.config import settings
from weather_activities.errors import AppError
from weather_activities.logging_config import setup_logging
from weather_activities.models import (
    ActivitiesResponse,
    City,
    CitySearchResponse,
    ForecastResponse,
    ForecastResult,
    Location,
)
from weather_activities.services.activities import ActivityRankingService
from weather_activities.services.cache import CacheBackend, build_cache
from weather_activities.services.cities import CitySearchService
from weather_activities.services.forecast import MAX_DAYS, MIN_DAYS, ForecastService
from weather_activities.services.metrics import LoggingMetrics, MetricsSink
from weather_activities.services.openmeteo import OpenMeteoClient

logger = logging.getLogger(__name__)

router = APIRouter()


@dataclass
class Services:
    forecasts: ForecastService
    activities: ActivityRankingService
    cities: CitySearchService


def create_app(
    *,
    cache: CacheBackend | None = None,
    client: OpenMeteoClient | None = None,
    metrics: MetricsSink | None = None,
) -> FastAPI:
    """Build the API. The app owns `cache`: it starts it on startup and closes it on shutdown."""
    setup_logging(settings.log_level)

    if cache is None:
        cache = build_cache(settings)
    if client is None:
        client = OpenMeteoClient(
            settings.openmeteo_base_url,
            settings.openmeteo_geocoding_url,
            settings.openmeteo_timeout_seconds,
        )
    if metrics is None:
        metrics = LoggingMetrics()

    forecasts = ForecastService(client, cache, metrics, ttl_seconds=settings.cache_ttl_forecast_seconds)
    services = Services(
        forecasts=forecasts,
        activities=ActivityRankingService(forecasts, metrics),
        cities=CitySearchService(client, cache, settings.cache_ttl_city_search_seconds, metrics),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await cache.start()
        logger.info("%s started (cache=%s)", settings.app_name, type(cache).__name__)
        try:
            yield
        finally:
            await cache.close()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.services = services
    app.add_exception_handler(AppError, _app_error_handler)
    app.include_router(router)
    return app


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _services(request: Request) -> Services:
    return request.app.state.services


@router.get("/health")
def health():
    return {"status": "ok", "service": settings.app_name}


@router.get("/")
def root():
    return JSONResponse({"service": settings.app_name, "docs": "/docs"})


# ── Coord-based endpoints ────────────────────────────────────────────────────

@router.get("/v1/weather/forecast", response_model=ForecastResponse)
async def forecast(
    request: Request,
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    days: int = Query(settings.default_forecast_days, ge=MIN_DAYS, le=MAX_DAYS),
):
    result = await _services(request).forecasts.get_forecast(lat, lon, days)
    return _forecast_response(result, Location(lat=lat, lon=lon))


@router.get("/v1/activities", response_model=ActivitiesResponse)
async def activities(
    request: Request,
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    days: int = Query(settings.default_forecast_days, ge=MIN_DAYS, le=MAX_DAYS),
):
    return await _rank(request, Location(lat=lat, lon=lon), days)


@router.get("/v1/cities", response_model=CitySearchResponse)
async def search_cities(
    request: Request,
    q: str = Query(..., min_length=1, max_length=100, description="City name, e.g. 'London'"),
):
    results = await _services(request).cities.search(q)
    return CitySearchResponse(query=q, results=results)


# ── City-name endpoints ──────────────────────────────────────────────────────

@router.get("/forecast", response_model=ForecastResponse)
async def forecast_by_city(
    request: Request,
    city: str = Query(..., min_length=1, description="City name, e.g. 'London'"),
    days: int = Query(settings.default_forecast_days, ge=MIN_DAYS, le=MAX_DAYS),
):
    location = await _geocode(request, city)
    result = await _services(request).forecasts.get_forecast(location.lat, location.lon, days)
    return _forecast_response(result, location)


@router.get("/activities", response_model=ActivitiesResponse)
async def activities_by_city(
    request: Request,
    city: str = Query(..., min_length=1, description="City name, e.g. 'London'"),
    days: int = Query(settings.default_forecast_days, ge=MIN_DAYS, le=MAX_DAYS),
):
    location = await _geocode(request, city)
    return await _rank(request, location, days)


# ── Shared helpers ───────────────────────────────────────────────────────────

async def _geocode(request: Request, city: str) -> Location:
    best: City = await _services(request).cities.resolve(city)
    return Location(lat=best.latitude, lon=best.longitude, name=best.name, country=best.country)


async def _rank(request: Request, location: Location, days: int) -> ActivitiesResponse:
    recommendations = await _services(request).activities.rank_activities(location.lat, location.lon, days)
    return ActivitiesResponse(
        location=location,
        timezone=recommendations.forecast.timezone,
        days=len(recommendations.forecast.daily_forecasts),
        activities=list(recommendations.activities),
    )


def _forecast_response(result: ForecastResult, location: Location) -> ForecastResponse:
    return ForecastResponse(
        location=location,
        timezone=result.timezone,
        days=len(result.daily_forecasts),
        daily=list(result.daily_forecasts),
    )


app = create_app()
