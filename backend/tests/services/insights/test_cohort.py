"""
Tests for team averages and athlete-vs-team comparison.
"""

import pytest

from app.services.insights.cohort import compare_to_team, resolve_metric_name, team_average


@pytest.fixture
def population():
    return [
        {"athlete_id": "A1", "date": "2024-05-01", "hrv_night": 50, "resting_hr": 60},
        {"athlete_id": "A1", "date": "2024-05-02", "hrv_night": 40, "resting_hr": 64},
        {"athlete_id": "A2", "date": "2024-05-01", "hrv_night": 70, "resting_hr": 52},
        {"athlete_id": "A3", "date": "2024-05-01", "hrv_night": 0, "resting_hr": 58},
        {"athlete_id": "A4", "date": "2024-05-01", "hrv_night": None, "training_load_pct": 0},
        {"athlete_id": "", "date": "2024-05-01", "hrv_night": 1000},
    ]


class TestTeamAverage:

    def test_includes_everyone(self, population):
        assert team_average("hrv_night", None, population) == pytest.approx((50 + 40 + 70) / 3)

    def test_excludes_athlete(self, population):
        assert team_average("hrv_night", "A1", population) == pytest.approx(70.0)

    def test_zero_values_do_not_dilute(self, population):
        # A3 is valid (resting_hr) but contributes nothing to HRV
        assert team_average("hrv_night", "A2", population) == pytest.approx(45.0)

    def test_invalid_only_population_is_none(self):
        population = [
            {"athlete_id": "A1", "date": "", "hrv_night": 50},
            {"athlete_id": "A2", "date": "2024-05-01", "hrv_night": 0},
            "junk",
        ]
        assert team_average("hrv_night", None, population) is None

    def test_empty_population_is_none(self):
        assert team_average("hrv_night", None, []) is None

    def test_everyone_excluded_is_none(self, population):
        only_a1 = [r for r in population if r["athlete_id"] == "A1"]
        assert team_average("hrv_night", "A1", only_a1) is None

    def test_unknown_metric_is_none(self, population):
        assert team_average("vo2max", None, population) is None

    def test_metric_name_casing(self, population):
        assert team_average("RestingHr", None, population) == pytest.approx((60 + 64 + 52 + 58) / 4)

    def test_numeric_athlete_ids(self):
        population = [
            {"athlete_id": 7, "date": "2024-05-01", "hrv_night": 50},
            {"athlete_id": 8, "date": "2024-05-01", "hrv_night": 30},
        ]
        assert team_average("hrv_night", "7", population) == pytest.approx(30.0)


class TestResolveMetricName:

    @pytest.mark.parametrize("name, expected", [
        ("hrv_night", "hrv_night"),
        ("hrvNight", "hrv_night"),
        ("SPO2_NIGHT", "spo2_night"),
        ("TrainingLoadPct", "training_load_pct"),
        ("vo2max", None),
        ("", None),
    ])
    def test_resolution(self, name, expected):
        assert resolve_metric_name(name) == expected


class TestCompareToTeam:

    def test_latest_value_against_others(self, population):
        comparison = compare_to_team("hrv_night", "A1", population)
        assert comparison.athlete_value == 40.0
        assert comparison.team_average == 70.0
        assert comparison.delta == -30.0

    def test_athlete_without_data(self, population):
        comparison = compare_to_team("hrv_night", "A9", population)
        assert comparison.athlete_value is None
        assert comparison.delta is None
        assert comparison.team_average == pytest.approx(53.33)
