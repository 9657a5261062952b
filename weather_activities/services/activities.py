import logging
import time
from typing import Optional

from weather_activities.models import ActivityRecommendations
from weather_activities.services.aggregation import aggregate_scores
from weather_activities.services.forecast import ForecastService
from weather_activities.services.metrics import MetricsSink
from weather_activities.services.ranking import rank
from weather_activities.services.scoring import score_days

logger = logging.getLogger(__name__)


class ActivityRankingService:
    """Forecast -> per-day scores -> per-activity averages -> ranked list."""

    def __init__(self, forecast_service: ForecastService, metrics: Optional[MetricsSink] = None):
        self.forecast_service = forecast_service
        self.metrics = metrics or MetricsSink()

    async def rank_activities(self, latitude: float, longitude: float, days: int = 7) -> ActivityRecommendations:
        started = time.perf_counter()
        logger.info("Activity ranking requested for (%s, %s), %s day(s)", latitude, longitude, days)
        self.metrics.increment_counter("activity.ranking.requests")

        forecast = await self.forecast_service.get_forecast(latitude, longitude, days)
        aggregated = aggregate_scores(score_days(forecast.daily_forecasts))
        activities = rank(aggregated, forecast.daily_forecasts)

        self.metrics.record_timing("activity.ranking.duration", (time.perf_counter() - started) * 1000)
        logger.info(
            "Activity ranking for (%s, %s) done: top=%s (%d)",
            latitude, longitude, activities[0].type.value, activities[0].score,
        )
        return ActivityRecommendations(forecast=forecast, activities=tuple(activities))
