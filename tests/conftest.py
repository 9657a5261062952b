"""
Shared fixtures. Nothing here talks to a real network or Redis: the provider
is an AsyncMock returning Open-Meteo shaped payloads.
"""
import datetime
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from weather_activities.models import DailyConditions


def _series(value, days: int) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else [value] * days


@pytest.fixture()
def make_payload():
    """Build an Open-Meteo `/forecast` response with `days` daily rows.

    Scalars are repeated for every day; lists are used as given.
    """

    def _make(
        days: int = 3,
        temp_max=12.0,
        temp_min=4.0,
        precipitation=0.0,
        wind=8.0,
        code=1,
        timezone: Optional[str] = "Europe/London",
    ) -> Dict[str, Any]:
        start = datetime.date(2024, 6, 1)
        payload: Dict[str, Any] = {
            "latitude": 51.5,
            "longitude": -0.125,
            "daily": {
                "time": [(start + datetime.timedelta(days=i)).isoformat() for i in range(days)],
                "temperature_2m_max": _series(temp_max, days),
                "temperature_2m_min": _series(temp_min, days),
                "precipitation_sum": _series(precipitation, days),
                "windspeed_10m_max": _series(wind, days),
                "weathercode": _series(code, days),
            },
        }
        if timezone is not None:
            payload["timezone"] = timezone
        return payload

    return _make


@pytest.fixture()
def provider(make_payload):
    """Provider mock that answers every request with a payload of the requested length."""
    mock = MagicMock()

    async def _fetch(latitude, longitude, days):
        return make_payload(days=days)

    mock.fetch_forecast = AsyncMock(side_effect=_fetch)
    return mock


@pytest.fixture()
def make_day():
    def _make(temp_max=12.0, precipitation=0.0, wind=8.0, code=1, temp_min=None) -> DailyConditions:
        return DailyConditions(
            date=datetime.date(2024, 6, 1),
            temperature_max=temp_max,
            temperature_min=temp_max - 8 if temp_min is None else temp_min,
            precipitation=precipitation,
            wind_speed=wind,
            weather_code=code,
        )

    return _make
