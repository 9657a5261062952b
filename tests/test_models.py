import datetime

import pydantic
import pytest

from weather_activities.models import (
    ActivityType,
    Coordinate,
    DailyConditions,
    RankedActivity,
    Suitability,
    WeatherCondition,
    condition_for_code,
    suitability_for,
)


@pytest.mark.parametrize(
    "code, condition",
    [
        (0, WeatherCondition.CLEAR),
        (1, WeatherCondition.CLEAR),
        (2, WeatherCondition.PARTLY_CLOUDY),
        (3, WeatherCondition.PARTLY_CLOUDY),
        (45, WeatherCondition.CLOUDY),
        (48, WeatherCondition.CLOUDY),
        (51, WeatherCondition.RAINY),
        (67, WeatherCondition.RAINY),
        (80, WeatherCondition.RAINY),
        (82, WeatherCondition.RAINY),
        (71, WeatherCondition.SNOWY),
        (77, WeatherCondition.SNOWY),
        (85, WeatherCondition.SNOWY),
        (86, WeatherCondition.SNOWY),
        (95, WeatherCondition.STORMY),
        (99, WeatherCondition.STORMY),
        (4, WeatherCondition.CLOUDY),
        (70, WeatherCondition.CLOUDY),
        (100, WeatherCondition.CLOUDY),
    ],
)
def test_condition_for_code(code, condition):
    assert condition_for_code(code) is condition


def test_condition_is_derived_and_serialized():
    day = DailyConditions(
        date="2024-01-05",
        temperature_max=-2,
        temperature_min=-9,
        precipitation=4.2,
        wind_speed=11,
        weather_code=73,
    )
    assert day.date == datetime.date(2024, 1, 5)
    assert day.condition is WeatherCondition.SNOWY
    assert day.model_dump(mode="json")["condition"] == "SNOWY"


@pytest.mark.parametrize("field", ["precipitation", "wind_speed"])
def test_daily_conditions_reject_negative_amounts(field):
    values = dict(date="2024-01-05", temperature_max=1, temperature_min=0, precipitation=0, wind_speed=0, weather_code=0)
    values[field] = -0.1
    with pytest.raises(pydantic.ValidationError):
        DailyConditions(**values)


def test_coordinate_is_immutable_and_bounded():
    coord = Coordinate(latitude=10, longitude=20)
    with pytest.raises(pydantic.ValidationError):
        coord.latitude = 11
    with pytest.raises(pydantic.ValidationError):
        Coordinate(latitude=float("nan"), longitude=0)


@pytest.mark.parametrize(
    "score, tier",
    [(100, Suitability.EXCELLENT), (80, Suitability.EXCELLENT), (79, Suitability.GOOD), (60, Suitability.GOOD),
     (59, Suitability.FAIR), (40, Suitability.FAIR), (39, Suitability.POOR), (0, Suitability.POOR)],
)
def test_suitability_thresholds(score, tier):
    assert suitability_for(score) is tier
    assert RankedActivity(type=ActivityType.SURFING, score=score, reason="x").suitability is tier


@pytest.mark.parametrize("score", [-1, 101])
def test_ranked_activity_score_bounds(score):
    with pytest.raises(pydantic.ValidationError):
        RankedActivity(type=ActivityType.SKIING, score=score, reason="x")


def test_activity_order_matches_declaration():
    assert [a.order for a in ActivityType] == [0, 1, 2, 3]
    assert ActivityType.SKIING.order < ActivityType.SURFING.order < ActivityType.INDOOR_SIGHTSEEING.order
