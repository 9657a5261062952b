import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from weather_activities.errors import ProviderError
from weather_activities.models import City
from weather_activities.services.provider import ForecastProvider

logger = logging.getLogger(__name__)

DAILY_FIELDS = "temperature_2m_max,temperature_2m_min,precipitation_sum,windspeed_10m_max,weathercode"


class OpenMeteoClient(ForecastProvider):
    def __init__(
        self,
        base_url: str = "https://api.open-meteo.com/v1",
        geocoding_url: str = "https://geocoding-api.open-meteo.com/v1",
        timeout_seconds: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.geocoding_url = geocoding_url.rstrip("/")
        self.timeout = timeout_seconds
        self._transport = transport

    async def search_cities(self, query: str, limit: int = 10) -> List[City]:
        """Resolve a (partial) city name to candidate cities via the Geocoding API."""
        url = f"{self.geocoding_url}/search"
        params = {"name": query, "count": limit, "language": "en", "format": "json"}
        data = await self._get_json(url, params)

        results: List[Dict[str, Any]] = data.get("results") or []
        logger.info("Geocoding %r returned %d result(s)", query, len(results))
        try:
            return [
                City(
                    id=r["id"],
                    name=r["name"],
                    latitude=r["latitude"],
                    longitude=r["longitude"],
                    country=r.get("country"),
                    country_code=r.get("country_code"),
                    timezone=r.get("timezone"),
                    population=r.get("population"),
                )
                for r in results
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderError.malformed_response(f"unusable geocoding result ({exc})", endpoint=url)

    async def fetch_forecast(self, latitude: float, longitude: float, days: int) -> Dict[str, Any]:
        url = f"{self.base_url}/forecast"
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "daily": DAILY_FIELDS,
            "forecast_days": days,
            "timezone": "auto",
        }
        return await self._get_json(url, params)

    async def _get_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.get(url, params=params)
                r.raise_for_status()
                data = r.json()
        except httpx.TimeoutException as exc:
            logger.error("Open-Meteo call to %s timed out: %s", url, exc)
            raise ProviderError.timeout(url, self.timeout)
        except httpx.HTTPStatusError as exc:
            logger.error("Open-Meteo call to %s failed with %s", url, exc.response.status_code)
            raise ProviderError.api_error(url, exc.response.status_code, _error_reason(exc.response))
        except httpx.RequestError as exc:
            logger.error("Open-Meteo call to %s failed: %s", url, exc)
            raise ProviderError.network_error(url, exc)
        except ValueError as exc:
            raise ProviderError.malformed_response(f"body is not JSON ({exc})", endpoint=url)

        if not isinstance(data, dict):
            raise ProviderError.malformed_response("expected a JSON object", endpoint=url)

        logger.debug("Open-Meteo call to %s took %.0fms", url, (time.perf_counter() - started) * 1000)
        return data


def _error_reason(response: httpx.Response) -> str:
    if response.status_code >= 500:
        return "Open-Meteo is currently unavailable"
    try:
        body = response.json()
    except ValueError:
        return response.text or "Invalid request"
    if isinstance(body, dict):
        return str(body.get("reason") or body.get("message") or "Invalid request")
    return "Invalid request"
