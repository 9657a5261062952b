"""
Ranker: orders aggregated activity scores and explains each one.

Ordering is score descending, then ActivityType declaration order
(SKIING, SURFING, INDOOR_SIGHTSEEING, OUTDOOR_SIGHTSEEING), so identical
input always produces identical output, ties included.

Reasons are picked from a per-activity template table keyed by the
suitability tier of the score, then filled in with summary statistics of
the forecast days.
"""
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Sequence

from weather_activities.models import (
    ActivityType,
    DailyConditions,
    RankedActivity,
    Suitability,
    WeatherCondition,
    suitability_for,
)


@dataclass(frozen=True)
class ForecastSummary:
    avg_temperature: float
    avg_precipitation: float
    avg_wind_speed: float
    snowy_days: int
    rainy_days: int

    @classmethod
    def from_days(cls, days: Sequence[DailyConditions]) -> "ForecastSummary":
        if not days:
            raise ValueError("cannot summarize an empty forecast")
        n = len(days)
        return cls(
            avg_temperature=sum(d.temperature_max for d in days) / n,
            avg_precipitation=sum(d.precipitation for d in days) / n,
            avg_wind_speed=sum(d.wind_speed for d in days) / n,
            snowy_days=sum(1 for d in days if d.condition is WeatherCondition.SNOWY),
            rainy_days=sum(1 for d in days if d.condition is WeatherCondition.RAINY),
        )


Template = Callable[[ForecastSummary], str]

_REASONS: Dict[ActivityType, Dict[Suitability, Template]] = {
    ActivityType.SKIING: {
        Suitability.EXCELLENT: lambda s: (
            f"Excellent skiing conditions with cold temperatures ({s.avg_temperature:.1f}°C) "
            f"and {'fresh snow' if s.snowy_days else 'good conditions'}"
        ),
        Suitability.GOOD: lambda s: f"Good skiing conditions with suitable temperatures ({s.avg_temperature:.1f}°C)",
        Suitability.FAIR: lambda s: (
            f"Fair skiing conditions, temperatures may be suboptimal ({s.avg_temperature:.1f}°C)"
        ),
        Suitability.POOR: lambda s: (
            f"Poor skiing conditions, too warm ({s.avg_temperature:.1f}°C) or unfavorable weather"
        ),
    },
    ActivityType.SURFING: {
        Suitability.EXCELLENT: lambda s: (
            f"Excellent surfing conditions with warm temperatures ({s.avg_temperature:.1f}°C) and favorable winds"
        ),
        Suitability.GOOD: lambda s: f"Good surfing conditions with pleasant temperatures ({s.avg_temperature:.1f}°C)",
        Suitability.FAIR: lambda s: (
            f"Fair surfing conditions, some rain ({s.avg_precipitation:.1f}mm) "
            f"or wind ({s.avg_wind_speed:.1f} km/h)"
        ),
        Suitability.POOR: lambda s: "Poor surfing conditions due to heavy rain, strong winds, or cold temperatures",
    },
    ActivityType.INDOOR_SIGHTSEEING: {
        Suitability.EXCELLENT: lambda s: (
            f"Excellent time for indoor activities with "
            f"{'rainy weather' if s.rainy_days else 'unfavorable outdoor conditions'}"
        ),
        Suitability.GOOD: lambda s: "Good option for indoor activities with moderate outdoor conditions",
        Suitability.FAIR: lambda s: "Indoor activities available, though outdoor conditions are favorable",
        # unreachable with the [40, 100] floor
        Suitability.POOR: lambda s: "Indoor activities available, though outdoor conditions are favorable",
    },
    ActivityType.OUTDOOR_SIGHTSEEING: {
        Suitability.EXCELLENT: lambda s: (
            f"Excellent outdoor sightseeing with ideal temperatures ({s.avg_temperature:.1f}°C) and minimal rain"
        ),
        Suitability.GOOD: lambda s: (
            f"Good outdoor sightseeing conditions with pleasant weather ({s.avg_temperature:.1f}°C)"
        ),
        Suitability.FAIR: lambda s: f"Fair outdoor sightseeing, some rain ({s.avg_precipitation:.1f}mm) expected",
        Suitability.POOR: lambda s: "Poor outdoor sightseeing conditions due to rain, wind, or extreme temperatures",
    },
}


def build_reason(activity: ActivityType, score: int, summary: ForecastSummary) -> str:
    return _REASONS[activity][suitability_for(score)](summary)


def sort_key(item: RankedActivity):
    return (-item.score, item.type.order)


def rank(
    aggregated: Mapping[ActivityType, int],
    daily_forecasts: Sequence[DailyConditions],
) -> List[RankedActivity]:
    """One RankedActivity per ActivityType, best first.

    Raises:
        ValueError: If `aggregated` does not hold exactly one score per activity.
    """
    missing = set(ActivityType) - set(aggregated)
    extra = set(aggregated) - set(ActivityType)
    if missing or extra:
        raise ValueError(
            f"need one score per activity (missing={sorted(map(str, missing))}, unknown={sorted(map(str, extra))})"
        )

    summary = ForecastSummary.from_days(daily_forecasts)
    ranked = [
        RankedActivity(type=activity, score=aggregated[activity], reason=build_reason(activity, aggregated[activity], summary))
        for activity in ActivityType
    ]
    return sorted(ranked, key=sort_key)
