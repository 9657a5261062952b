"""Cache-aside forecast lookups around a ForecastProvider."""
import logging
import math
import time
from typing import Any, Dict, List, Optional

import pydantic

from weather_activities.errors import CacheError, ProviderError, ValidationError
from weather_activities.models import Coordinate, DailyConditions, ForecastResult
from weather_activities.services.cache import CacheBackend, forecast_cache_key
from weather_activities.services.metrics import MetricsSink
from weather_activities.services.provider import ForecastProvider

logger = logging.getLogger(__name__)

MIN_DAYS = 1
MAX_DAYS = 16
DEFAULT_TTL_SECONDS = 1800

# payload array -> DailyConditions field
DAILY_ARRAYS = {
    "time": "date",
    "temperature_2m_max": "temperature_max",
    "temperature_2m_min": "temperature_min",
    "precipitation_sum": "precipitation",
    "windspeed_10m_max": "wind_speed",
    "weathercode": "weather_code",
}


def validate_coordinate(latitude: Any, longitude: Any) -> Coordinate:
    for field, value, bound in (("latitude", latitude, 90), ("longitude", longitude, 180)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError.invalid_input(field, value, "must be a number")
        if not math.isfinite(value):
            raise ValidationError.invalid_input(field, value, "must be a finite number")
        if not -bound <= value <= bound:
            raise ValidationError.invalid_input(field, value, f"must be between -{bound} and {bound}")
    return Coordinate(latitude=latitude, longitude=longitude)


def validate_days(days: Any) -> int:
    if isinstance(days, bool) or not isinstance(days, int):
        raise ValidationError.invalid_input("days", days, "must be an integer")
    if not MIN_DAYS <= days <= MAX_DAYS:
        raise ValidationError.invalid_input("days", days, f"must be between {MIN_DAYS} and {MAX_DAYS}")
    return days


def normalize_forecast(payload: Dict[str, Any], coordinate: Coordinate, days: int) -> ForecastResult:
    """Turn a raw provider payload into a ForecastResult, or raise ProviderError."""
    daily = payload.get("daily")
    if not isinstance(daily, dict):
        raise ProviderError.malformed_response("missing daily forecast data", field="daily")

    for name in DAILY_ARRAYS:
        if not isinstance(daily.get(name), list):
            raise ProviderError.malformed_response(f"missing required daily field {name!r}", field=name)

    lengths = {name: len(daily[name]) for name in DAILY_ARRAYS}
    if len(set(lengths.values())) != 1:
        odd = next(name for name, n in lengths.items() if n != lengths["time"])
        raise ProviderError.malformed_response(
            f"inconsistent array lengths in daily data ({odd}={lengths[odd]}, time={lengths['time']})",
            field=odd,
        )
    if lengths["time"] != days:
        raise ProviderError.malformed_response(
            f"expected {days} day(s), got {lengths['time']}", field="time"
        )

    conditions: List[DailyConditions] = []
    for i in range(days):
        row = {attr: daily[name][i] for name, attr in DAILY_ARRAYS.items()}
        try:
            conditions.append(DailyConditions(**row))
        except pydantic.ValidationError as exc:
            attr = str(exc.errors()[0]["loc"][0])
            name = next(n for n, a in DAILY_ARRAYS.items() if a == attr)
            raise ProviderError.malformed_response(
                f"invalid {name} value {row[attr]!r} for day {i}", field=name
            )

    timezone = payload.get("timezone") or "GMT"
    return ForecastResult(coordinate=coordinate, timezone=str(timezone), daily_forecasts=tuple(conditions))


class ForecastService:
    """
    Validates requests, then serves forecasts cache-aside:
    a hit never touches the provider, a miss calls it exactly once.

    Concurrent misses for the same key are not coalesced; each one fetches
    and the last write wins.
    """

    def __init__(
        self,
        provider: ForecastProvider,
        cache: CacheBackend,
        metrics: Optional[MetricsSink] = None,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
    ):
        self.provider = provider
        self.cache = cache
        self.metrics = metrics or MetricsSink()
        self.ttl_seconds = ttl_seconds

    async def get_forecast(self, latitude: float, longitude: float, days: int = 7) -> ForecastResult:
        started = time.perf_counter()
        logger.info("Forecast requested for (%s, %s), %s day(s)", latitude, longitude, days)
        self.metrics.increment_counter("weather.forecast.requests")

        try:
            coordinate = validate_coordinate(latitude, longitude)
            days = validate_days(days)
        except ValidationError as exc:
            logger.warning("Rejected forecast request: %s", exc.message)
            self.metrics.increment_counter("weather.forecast.validation_error")
            raise

        key = forecast_cache_key(coordinate.latitude, coordinate.longitude, days)
        cached = await self.cache.get(key)
        if cached is not None:
            self.metrics.increment_counter("weather.forecast.cache_hit")
            try:
                result = ForecastResult.model_validate(cached)
            except pydantic.ValidationError as exc:
                raise CacheError(
                    "Failed to deserialize value from cache", operation="get", cache_key=key, cause=exc
                ) from exc
            self._record_duration(started, "hit")
            return result

        logger.info("Forecast cache miss for %s, calling provider", key)
        self.metrics.increment_counter("weather.forecast.cache_miss")

        api_started = time.perf_counter()
        try:
            payload = await self.provider.fetch_forecast(coordinate.latitude, coordinate.longitude, days)
            if not isinstance(payload, dict):
                raise ProviderError.malformed_response("expected a JSON object")
            result = normalize_forecast(payload, coordinate, days)
        except ProviderError as exc:
            logger.error("Forecast fetch for %s failed: %s", key, exc.message)
            self.metrics.increment_counter("weather.forecast.api_error")
            raise
        except Exception as exc:
            logger.exception("Forecast fetch for %s failed unexpectedly", key)
            self.metrics.increment_counter("weather.forecast.api_error")
            raise ProviderError("Failed to fetch weather forecast", cause=exc) from exc
        self.metrics.record_timing("weather.forecast.api_call", _ms_since(api_started))

        await self.cache.set(key, result.model_dump(mode="json"), self.ttl_seconds)
        self._record_duration(started, "miss")
        return result

    def _record_duration(self, started: float, cache: str) -> None:
        self.metrics.record_timing("weather.forecast.duration", _ms_since(started), {"cache": cache})


def _ms_since(started: float) -> float:
    return (time.perf_counter() - started) * 1000
