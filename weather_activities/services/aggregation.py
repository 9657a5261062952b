import math
from typing import Dict, Mapping, Sequence

from weather_activities.models import ActivityType


def aggregate(scores: Sequence[int]) -> int:
    """Mean of one activity's per-day scores, rounded half up (72.5 -> 73)."""
    if not scores:
        raise ValueError("cannot aggregate an empty score list")
    return math.floor(sum(scores) / len(scores) + 0.5)


def aggregate_scores(daily_scores: Mapping[ActivityType, Sequence[int]]) -> Dict[ActivityType, int]:
    return {activity: aggregate(scores) for activity, scores in daily_scores.items()}
