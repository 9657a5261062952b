import logging
import re
import time
from typing import List, Optional

from weather_activities.errors import NotFoundError, ValidationError
from weather_activities.models import City
from weather_activities.services.cache import CacheBackend
from weather_activities.services.metrics import MetricsSink
from weather_activities.services.openmeteo import OpenMeteoClient

logger = logging.getLogger(__name__)

MAX_QUERY_LENGTH = 100
DEFAULT_TTL_SECONDS = 3600

_DISALLOWED = re.compile(r"[^A-Za-z0-9\s\-']")


def sanitize_query(query: str) -> str:
    """Drop characters outside letters, digits, spaces, hyphens and apostrophes; collapse whitespace."""
    return " ".join(_DISALLOWED.sub("", query).split())


def city_cache_key(query: str) -> str:
    return f"cities:{sanitize_query(query).lower()}"


def order_by_relevance(cities: List[City], query: str) -> List[City]:
    """Exact name matches first, then larger population, then name."""
    wanted = query.lower()

    def key(city: City):
        name = city.name.lower()
        return (name != wanted, -(city.population or 0), name)

    return sorted(cities, key=key)


class CitySearchService:
    """Cached city-name lookups, used to turn `?city=` into coordinates."""

    def __init__(
        self,
        client: OpenMeteoClient,
        cache: CacheBackend,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        metrics: Optional[MetricsSink] = None,
    ):
        self.client = client
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.metrics = metrics or MetricsSink()

    async def search(self, query: str) -> List[City]:
        started = time.perf_counter()
        self.metrics.increment_counter("city.search.requests")

        query = (query or "").strip()
        if not query:
            raise ValidationError.invalid_input("query", query, "must not be empty")
        if len(query) > MAX_QUERY_LENGTH:
            raise ValidationError.invalid_input("query", query, f"must be at most {MAX_QUERY_LENGTH} characters")
        sanitized = sanitize_query(query)
        if not sanitized:
            self.metrics.increment_counter("city.search.invalid_query")
            raise ValidationError.invalid_input("query", query, "must contain letters or digits")

        key = city_cache_key(sanitized)
        cached = await self.cache.get(key)
        if cached is not None:
            logger.info("City search cache hit for %r (%d result(s))", sanitized, len(cached))
            self.metrics.increment_counter("city.search.cache_hit")
            self._record_duration(started, "hit")
            return [City.model_validate(c) for c in cached]

        logger.info("City search cache miss for %r, calling geocoding API", sanitized)
        self.metrics.increment_counter("city.search.cache_miss")

        api_started = time.perf_counter()
        cities = await self.client.search_cities(sanitized)
        self.metrics.record_timing("city.search.api_call", (time.perf_counter() - api_started) * 1000)

        cities = order_by_relevance(cities, sanitized)
        await self.cache.set(key, [c.model_dump(mode="json") for c in cities], self.ttl_seconds)
        self._record_duration(started, "miss")
        return cities

    async def resolve(self, query: str) -> City:
        """Best match for `query`; raises NotFoundError when there is none."""
        cities = await self.search(query)
        if not cities:
            logger.info("No city matches %r", query)
            raise NotFoundError.city(query)
        return cities[0]

    def _record_duration(self, started: float, cache: str) -> None:
        self.metrics.record_timing("city.search.duration", (time.perf_counter() - started) * 1000, {"cache": cache})
