"""Tests for the per-day scoring rules."""
import itertools

import pytest

from weather_activities.models import ActivityType
from weather_activities.services.scoring import (
    SCORE_BOUNDS,
    score,
    score_days,
    score_indoor_sightseeing,
    score_outdoor_sightseeing,
    score_skiing,
    score_surfing,
)

CLEAR, PARTLY_CLOUDY, FOG, RAIN, SNOW, STORM = 0, 2, 45, 61, 73, 95


# ---------------------------------------------------------------------------
# Reference scenarios
# ---------------------------------------------------------------------------

def test_cold_snowy_day_maxes_out_skiing(make_day):
    # 50 + 30 + 20 + 10 = 110, clamped
    day = make_day(temp_max=-5, precipitation=10, code=SNOW)
    assert score(ActivityType.SKIING, day) == 100


def test_warm_calm_clear_day_is_great_for_surfing(make_day):
    day = make_day(temp_max=25, precipitation=0, wind=15, code=CLEAR)
    assert score(ActivityType.SURFING, day) == 90


def test_rainy_mild_day_favours_indoor_sightseeing(make_day):
    day = make_day(temp_max=10, precipitation=10, wind=5, code=RAIN)
    indoor = score(ActivityType.INDOOR_SIGHTSEEING, day)
    others = [score(a, day) for a in ActivityType if a is not ActivityType.INDOOR_SIGHTSEEING]
    assert indoor == 90
    assert all(indoor > s for s in others)


# ---------------------------------------------------------------------------
# Skiing
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "temp_max, expected",
    [(-0.1, 80), (0, 70), (5, 70), (5.1, 50), (15, 50), (15.1, 30)],
)
def test_skiing_temperature_bands(make_day, temp_max, expected):
    assert score_skiing(make_day(temp_max=temp_max, code=CLEAR)) == expected


def test_skiing_rewards_snow_and_heavy_precipitation(make_day):
    assert score_skiing(make_day(temp_max=10, code=SNOW)) == 70
    assert score_skiing(make_day(temp_max=10, precipitation=5)) == 50
    assert score_skiing(make_day(temp_max=10, precipitation=5.1)) == 60


# ---------------------------------------------------------------------------
# Surfing
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "temp_max, expected",
    [(14.9, 50), (15, 70), (20, 70), (20.1, 80)],
)
def test_surfing_temperature_bands(make_day, temp_max, expected):
    assert score_surfing(make_day(temp_max=temp_max, wind=5)) == expected


@pytest.mark.parametrize(
    "wind, expected",
    [(9.9, 50), (10, 60), (20, 60), (20.1, 50), (30, 50), (30.1, 30)],
)
def test_surfing_wind_bands(make_day, wind, expected):
    assert score_surfing(make_day(temp_max=5, wind=wind)) == expected


def test_surfing_floor_is_zero(make_day):
    assert score_surfing(make_day(temp_max=5, precipitation=20, wind=50)) == 0


# ---------------------------------------------------------------------------
# Indoor sightseeing
# ---------------------------------------------------------------------------

def test_indoor_sightseeing_base(make_day):
    assert score_indoor_sightseeing(make_day(temp_max=20, code=CLEAR)) == 60


@pytest.mark.parametrize("temp_max, expected", [(4.9, 80), (5, 60), (35, 60), (35.1, 80)])
def test_indoor_sightseeing_extreme_temperatures(make_day, temp_max, expected):
    assert score_indoor_sightseeing(make_day(temp_max=temp_max)) == expected


def test_indoor_sightseeing_storm_and_rain_cap_at_100(make_day):
    assert score_indoor_sightseeing(make_day(temp_max=20, code=STORM)) == 70
    assert score_indoor_sightseeing(make_day(temp_max=40, precipitation=30, code=STORM)) == 100


# ---------------------------------------------------------------------------
# Outdoor sightseeing
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "temp_max, expected",
    [(9.9, 50), (10, 70), (14.9, 70), (15, 80), (25, 80), (25.1, 70), (30, 70), (30.1, 50)],
)
def test_outdoor_sightseeing_temperature_bands(make_day, temp_max, expected):
    assert score_outdoor_sightseeing(make_day(temp_max=temp_max, code=FOG)) == expected


def test_outdoor_sightseeing_penalties_and_sky_bonus(make_day):
    assert score_outdoor_sightseeing(make_day(temp_max=20, code=CLEAR)) == 90
    assert score_outdoor_sightseeing(make_day(temp_max=20, code=PARTLY_CLOUDY)) == 90
    assert score_outdoor_sightseeing(make_day(temp_max=20, precipitation=2, code=FOG)) == 80
    assert score_outdoor_sightseeing(make_day(temp_max=20, precipitation=2.1, code=FOG)) == 50
    assert score_outdoor_sightseeing(make_day(temp_max=20, wind=41, code=FOG)) == 60
    assert score_outdoor_sightseeing(make_day(temp_max=0, precipitation=10, wind=50, code=RAIN)) == 0


# ---------------------------------------------------------------------------
# Bounds and dispatch
# ---------------------------------------------------------------------------

def test_scores_stay_within_activity_bounds(make_day):
    temps = [-30, -1, 0, 3, 5, 10, 15, 20, 25, 30, 36, 45]
    precips = [0, 2.5, 6, 50]
    winds = [0, 15, 35, 60]
    codes = [CLEAR, PARTLY_CLOUDY, FOG, RAIN, SNOW, STORM, 999]
    for t, p, w, c in itertools.product(temps, precips, winds, codes):
        day = make_day(temp_max=t, precipitation=p, wind=w, code=c)
        for activity in ActivityType:
            low, high = SCORE_BOUNDS[activity]
            value = score(activity, day)
            assert isinstance(value, int)
            assert low <= value <= high


def test_indoor_sightseeing_never_drops_below_40():
    assert SCORE_BOUNDS[ActivityType.INDOOR_SIGHTSEEING] == (40, 100)


def test_score_rejects_unknown_activity(make_day):
    with pytest.raises(ValueError):
        score("KAYAKING", make_day())


def test_score_days_covers_every_activity_in_order(make_day):
    days = [make_day(temp_max=-5, code=SNOW), make_day(temp_max=22, wind=12)]
    per_activity = score_days(days)
    assert list(per_activity) == list(ActivityType)
    assert all(len(scores) == 2 for scores in per_activity.values())
    assert per_activity[ActivityType.SKIING] == [100, 30]
