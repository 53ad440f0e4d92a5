"""
Tests for horizon selection over dated series.
"""
import pytest
from datetime import date, timedelta

from yieldwatch.services.data_providers import Horizon, SeriesPoint, select_observation


LATEST = date(2026, 10, 16)


def _series(*ages):
    """Points aged ``ages`` days before LATEST, oldest first; value = age."""
    return [SeriesPoint(t=LATEST - timedelta(days=a), v=a) for a in sorted(ages, reverse=True)]


class TestSelectObservation:

    @pytest.fixture
    def series(self):
        return _series(40, 20, 5, 0)

    def test_today_is_latest(self, series):
        assert select_observation(series, Horizon.TODAY).v == 0

    def test_one_week_walks_back_to_first_qualifying(self, series):
        assert select_observation(series, Horizon.ONE_WEEK).v == 20

    def test_one_month(self, series):
        assert select_observation(series, Horizon.ONE_MONTH).v == 40

    def test_accepts_string_horizon(self, series):
        assert select_observation(series, "1w").v == 20

    def test_exact_boundary_qualifies(self):
        assert select_observation(_series(7, 3, 0), "1w").v == 7

    def test_closest_qualifying_row_wins(self):
        # Walking back from the latest, 8 is met before 31
        assert select_observation(_series(31, 8, 0), "1w").v == 8

    def test_short_series_falls_back_to_latest(self):
        assert select_observation(_series(3, 0), "1m").v == 0

    def test_single_point(self):
        assert select_observation(_series(0), "1w").v == 0

    def test_empty_series(self):
        assert select_observation([], Horizon.TODAY) is None

    def test_unknown_horizon_raises(self):
        with pytest.raises(ValueError):
            select_observation(_series(0), "1y")
