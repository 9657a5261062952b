"""
Rule-based activity scoring for a single forecast day.

Every scorer starts from a base score, applies independent additive rules
and clamps once at the end, so rule order never matters. The thresholds are
fixed business rules:

    SKIING               base 50, bound [0, 100]
    SURFING              base 50, bound [0, 100]
    INDOOR_SIGHTSEEING   base 60, bound [40, 100]  (always somewhat viable)
    OUTDOOR_SIGHTSEEING  base 50, bound [0, 100]
"""
from typing import Dict, Iterable, List, Tuple

from weather_activities.models import ActivityType, DailyConditions, WeatherCondition

SCORE_BOUNDS: Dict[ActivityType, Tuple[int, int]] = {
    ActivityType.SKIING: (0, 100),
    ActivityType.SURFING: (0, 100),
    ActivityType.INDOOR_SIGHTSEEING: (40, 100),
    ActivityType.OUTDOOR_SIGHTSEEING: (0, 100),
}


def clamp(value: float, low: int, high: int) -> int:
    return int(max(low, min(high, value)))


def score_skiing(day: DailyConditions) -> int:
    """Cold days, fresh snow and heavy (snow) precipitation."""
    score = 50
    t = day.temperature_max
    if t < 0:
        score += 30
    elif t <= 5:
        score += 20
    elif t > 15:
        score -= 20

    if day.condition is WeatherCondition.SNOWY:
        score += 20
    if day.precipitation > 5:
        score += 10
    return clamp(score, *SCORE_BOUNDS[ActivityType.SKIING])


def score_surfing(day: DailyConditions) -> int:
    """Warm, dry days with a moderate wind."""
    score = 50
    t = day.temperature_max
    if t > 20:
        score += 30
    elif t >= 15:
        score += 20

    if day.precipitation > 5:
        score -= 30

    if day.wind_speed > 30:
        score -= 20
    elif 10 <= day.wind_speed <= 20:
        score += 10
    return clamp(score, *SCORE_BOUNDS[ActivityType.SURFING])


def score_indoor_sightseeing(day: DailyConditions) -> int:
    """Bad outdoor weather pushes indoor sightseeing up."""
    score = 60
    if day.precipitation > 5:
        score += 30
    if day.temperature_max < 5 or day.temperature_max > 35:
        score += 20
    if day.condition is WeatherCondition.STORMY:
        score += 10
    return clamp(score, *SCORE_BOUNDS[ActivityType.INDOOR_SIGHTSEEING])


def score_outdoor_sightseeing(day: DailyConditions) -> int:
    """Mild, dry, calm days."""
    score = 50
    t = day.temperature_max
    if 15 <= t <= 25:
        score += 30
    elif 10 <= t < 15 or 25 < t <= 30:
        score += 20

    if day.precipitation > 2:
        score -= 30
    if day.wind_speed > 40:
        score -= 20
    if day.condition in (WeatherCondition.CLEAR, WeatherCondition.PARTLY_CLOUDY):
        score += 10
    return clamp(score, *SCORE_BOUNDS[ActivityType.OUTDOOR_SIGHTSEEING])


def score(activity: ActivityType, day: DailyConditions) -> int:
    match activity:
        case ActivityType.SKIING:
            return score_skiing(day)
        case ActivityType.SURFING:
            return score_surfing(day)
        case ActivityType.INDOOR_SIGHTSEEING:
            return score_indoor_sightseeing(day)
        case ActivityType.OUTDOOR_SIGHTSEEING:
            return score_outdoor_sightseeing(day)
    raise ValueError(f"Unknown activity: {activity!r}")


def score_days(days: Iterable[DailyConditions]) -> Dict[ActivityType, List[int]]:
    """Per-day scores for every activity, keyed in ActivityType order."""
    per_activity: Dict[ActivityType, List[int]] = {activity: [] for activity in ActivityType}
    for day in days:
        for activity, scores in per_activity.items():
            scores.append(score(activity, day))
    return per_activity
