import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field


class WeatherCondition(str, Enum):
    CLEAR = "CLEAR"
    PARTLY_CLOUDY = "PARTLY_CLOUDY"
    CLOUDY = "CLOUDY"
    RAINY = "RAINY"
    SNOWY = "SNOWY"
    STORMY = "STORMY"


class ActivityType(str, Enum):
    """Activities we rank. Declaration order is the tie-break order."""

    SKIING = "SKIING"
    SURFING = "SURFING"
    INDOOR_SIGHTSEEING = "INDOOR_SIGHTSEEING"
    OUTDOOR_SIGHTSEEING = "OUTDOOR_SIGHTSEEING"

    @property
    def order(self) -> int:
        return list(ActivityType).index(self)


class Suitability(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"


def condition_for_code(code: int) -> WeatherCondition:
    """Map a WMO weather interpretation code onto our condition taxonomy."""
    if code in (0, 1):
        return WeatherCondition.CLEAR
    if code in (2, 3):
        return WeatherCondition.PARTLY_CLOUDY
    if 45 <= code <= 48:
        return WeatherCondition.CLOUDY
    if 51 <= code <= 67 or 80 <= code <= 82:
        return WeatherCondition.RAINY
    if 71 <= code <= 77 or 85 <= code <= 86:
        return WeatherCondition.SNOWY
    if 95 <= code <= 99:
        return WeatherCondition.STORMY
    return WeatherCondition.CLOUDY


def suitability_for(score: int) -> Suitability:
    if score >= 80:
        return Suitability.EXCELLENT
    if score >= 60:
        return Suitability.GOOD
    if score >= 40:
        return Suitability.FAIR
    return Suitability.POOR


# ── Domain values ────────────────────────────────────────────────────────────

class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class DailyConditions(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    date: datetime.date
    temperature_max: float
    temperature_min: float
    precipitation: float = Field(..., ge=0, description="mm")
    wind_speed: float = Field(..., ge=0, description="km/h")
    weather_code: int

    @computed_field  # type: ignore[misc]
    @property
    def condition(self) -> WeatherCondition:
        return condition_for_code(self.weather_code)


class ForecastResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    coordinate: Coordinate
    timezone: str
    daily_forecasts: Tuple[DailyConditions, ...]


class RankedActivity(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ActivityType
    score: int = Field(..., ge=0, le=100)
    reason: str = Field(..., min_length=1)

    @computed_field  # type: ignore[misc]
    @property
    def suitability(self) -> Suitability:
        return suitability_for(self.score)


class City(BaseModel):
    id: int
    name: str
    latitude: float
    longitude: float
    country: Optional[str] = None
    country_code: Optional[str] = None
    timezone: Optional[str] = None
    population: Optional[int] = Field(default=None, ge=0)


class ActivityRecommendations(BaseModel):
    model_config = ConfigDict(frozen=True)

    forecast: ForecastResult
    activities: Tuple[RankedActivity, ...]


# ── API responses ────────────────────────────────────────────────────────────

class Location(BaseModel):
    lat: float
    lon: float
    name: Optional[str] = None
    country: Optional[str] = None


class ProviderInfo(BaseModel):
    name: str = "open-meteo"


class ForecastResponse(BaseModel):
    location: Location
    timezone: str
    days: int
    daily: List[DailyConditions] = Field(default_factory=list)
    provider: ProviderInfo = Field(default_factory=ProviderInfo)


class ActivitiesResponse(BaseModel):
    location: Location
    timezone: str
    days: int
    activities: List[RankedActivity] = Field(default_factory=list)
    provider: ProviderInfo = Field(default_factory=ProviderInfo)


class CitySearchResponse(BaseModel):
    query: str
    results: List[City] = Field(default_factory=list)
