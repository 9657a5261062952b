"""Forecast provider abstraction - lets the forecast service run against any upstream."""
from abc import ABC, abstractmethod
from typing import Any, Dict


class ForecastProvider(ABC):
    @abstractmethod
    async def fetch_forecast(self, latitude: float, longitude: float, days: int) -> Dict[str, Any]:
        """
        Fetch raw daily forecast data.

        Returns a mapping with a ``daily`` object holding equal-length arrays
        ``time``, ``temperature_2m_max``, ``temperature_2m_min``,
        ``precipitation_sum``, ``windspeed_10m_max`` and ``weathercode``,
        plus an optional ``timezone`` label. The payload is returned as-is;
        checking its shape is the caller's job.

        Raises:
            ProviderError: If the upstream call fails.
        """
