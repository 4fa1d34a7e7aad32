"""Season resolution and period arithmetic."""

from datetime import date, timedelta

from condosplit.services.split_settings import SplitSettings
from condosplit.services.split_types import Season


def resolve_season(month: int, settings: SplitSettings) -> Season:
    """Return SUMMER iff summer_start_month <= month <= summer_end_month.

    The range does not wrap around December.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    if settings.summer_start_month <= month <= settings.summer_end_month:
        return Season.SUMMER
    return Season.WINTER


def period_midpoint(date_from: date, date_to: date) -> date:
    return date_from + timedelta(days=(date_to - date_from).days // 2)


def season_for_period(date_from: date, date_to: date, settings: SplitSettings) -> Season:
    """Classify the whole period by the calendar month of its midpoint date.

    A period straddling the season boundary falls wholly into one season.
    """
    return resolve_season(period_midpoint(date_from, date_to).month, settings)


def count_months(date_from: date, date_to: date) -> int:
    """Number of calendar months touched by the period (at least 1).

    Monthly fixed amounts are multiplied by this value.
    """
    months = (date_to.year - date_from.year) * 12 + (date_to.month - date_from.month) + 1
    return max(1, months)
