"""Unit tests for season resolution and period arithmetic."""

from datetime import date

import pytest

from condosplit.services.season import count_months, period_midpoint, resolve_season, season_for_period
from condosplit.services.split_settings import SplitSettings
from condosplit.services.split_types import Season


class TestResolveSeason:
    """Tests for resolve_season."""

    @pytest.mark.parametrize("month", [6, 7, 8, 9])
    def test_summer_months_with_defaults(self, default_settings, month):
        assert resolve_season(month, default_settings) == Season.SUMMER

    @pytest.mark.parametrize("month", [1, 2, 3, 4, 5, 10, 11, 12])
    def test_winter_months_with_defaults(self, default_settings, month):
        assert resolve_season(month, default_settings) == Season.WINTER

    def test_custom_summer_range(self):
        """Boundaries of a custom range are inclusive."""
        settings = SplitSettings(summer_start_month=5, summer_end_month=10)

        assert resolve_season(5, settings) == Season.SUMMER
        assert resolve_season(10, settings) == Season.SUMMER
        assert resolve_season(4, settings) == Season.WINTER
        assert resolve_season(11, settings) == Season.WINTER

    def test_range_does_not_wrap(self):
        """A start after the end makes every month winter."""
        settings = SplitSettings(summer_start_month=11, summer_end_month=2)

        assert resolve_season(12, settings) == Season.WINTER
        assert resolve_season(1, settings) == Season.WINTER

    @pytest.mark.parametrize("month", [0, 13, -1])
    def test_invalid_month_raises(self, default_settings, month):
        with pytest.raises(ValueError, match="between 1 and 12"):
            resolve_season(month, default_settings)


class TestPeriod:
    """Tests for period midpoint, season and month count."""

    def test_midpoint_of_january(self):
        assert period_midpoint(date(2025, 1, 1), date(2025, 1, 31)) == date(2025, 1, 16)

    def test_midpoint_of_single_day(self):
        assert period_midpoint(date(2025, 3, 10), date(2025, 3, 10)) == date(2025, 3, 10)

    def test_quarter_straddling_boundary_is_summer(self, default_settings):
        """May-July has its midpoint in June."""
        assert season_for_period(date(2025, 5, 1), date(2025, 7, 31), default_settings) == Season.SUMMER

    def test_short_period_before_boundary_is_winter(self, default_settings):
        """May 20 - June 10 has its midpoint on May 30."""
        assert season_for_period(date(2025, 5, 20), date(2025, 6, 10), default_settings) == Season.WINTER

    @pytest.mark.parametrize(
        "date_from,date_to,expected",
        [
            (date(2025, 1, 1), date(2025, 1, 31), 1),
            (date(2025, 1, 15), date(2025, 1, 20), 1),
            (date(2025, 1, 1), date(2025, 3, 31), 3),
            (date(2025, 1, 31), date(2025, 2, 1), 2),
            (date(2024, 11, 1), date(2025, 2, 28), 4),
            (date(2025, 1, 1), date(2025, 12, 31), 12),
        ],
    )
    def test_count_months(self, date_from, date_to, expected):
        assert count_months(date_from, date_to) == expected

    def test_count_months_never_below_one(self):
        assert count_months(date(2025, 3, 1), date(2025, 2, 1)) == 1
