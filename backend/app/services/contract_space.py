"""Tradable contract space: strike ladder and expiration calendar."""

import calendar
import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta

import pytz

from app.core.config import settings
from app.core.constants import CalendarConstants, LadderConstants

logger = logging.getLogger(__name__)


def strike_interval(spot: float) -> float:
    """Strike spacing for the band containing ``spot``."""
    for upper_bound, interval in LadderConstants.INTERVAL_BANDS:
        if spot < upper_bound:
            return interval
    return LadderConstants.TOP_INTERVAL


def generate_strikes(spot: float) -> list[float]:
    """
    Build an evenly spaced strike ladder around the spot price.

    The base strike is the interval multiple nearest to ``spot``; the ladder
    is ``base + i * interval`` for ``i`` in ``[-6, 6]`` with non-positive
    strikes dropped.

    Args:
        spot: Current underlying price

    Returns:
        Ascending list of at most 13 positive strikes
    """
    interval = strike_interval(spot)
    # Nearest multiple of the interval, ties rounded up
    base = int(spot / interval + 0.5) * interval
    steps = LadderConstants.STEPS_EACH_SIDE
    strikes = [base + i * interval for i in range(-steps, steps + 1)]
    return sorted(strike for strike in strikes if strike > 0)


def ladder_fallback(strikes: list[float], index: int) -> float:
    """
    Ladder element at ``index`` of the full 13-strike ladder.

    Indices count from the lowest strike of the untruncated ladder, so index 6
    is always the base strike and index 4 is two strikes below it. The
    positivity filter only removes low strikes; positions that fell off the
    bottom resolve to the lowest surviving strike.
    """
    full_size = 2 * LadderConstants.STEPS_EACH_SIDE + 1
    position = index - (full_size - len(strikes))
    return strikes[max(0, min(position, len(strikes) - 1))]


def first_strike(strikes: list[float], predicate: Callable[[float], bool], fallback_index: int) -> float:
    """First ladder strike satisfying ``predicate``, else the fallback position."""
    for strike in strikes:
        if predicate(strike):
            return strike
    return ladder_fallback(strikes, fallback_index)


def market_today() -> date:
    """Current date in the configured market timezone."""
    return datetime.now(pytz.timezone(settings.timezone)).date()


def next_friday(day: date) -> date:
    """``day`` itself when it is a Friday, otherwise the following Friday."""
    return day + timedelta(days=(CalendarConstants.FRIDAY - day.weekday()) % 7)


def _add_months(day: date, months: int, day_of_month: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day_of_month, calendar.monthrange(year, month)[1]))


def get_expiration_dates(
    min_dte: int = 30,
    max_dte: int = 45,
    today: date | None = None,
) -> list[date]:
    """
    Candidate Friday expirations whose DTE lies in ``[min_dte, max_dte]``.

    Weekly candidates (1-12 weeks out, rolled forward to Friday) come first,
    then monthly candidates (the first Friday on or after the 15th of the next
    three months, approximating the 3rd-Friday cycle).

    Args:
        min_dte: Minimum days to expiry (inclusive)
        max_dte: Maximum days to expiry (inclusive)
        today: Reference date; defaults to today in the market timezone

    Returns:
        Up to 3 dates in generation order, duplicates removed
    """
    today = today or market_today()

    candidates = [
        next_friday(today + timedelta(weeks=weeks))
        for weeks in range(1, CalendarConstants.WEEKLY_HORIZON + 1)
    ]
    candidates += [
        next_friday(_add_months(today, months, CalendarConstants.MONTHLY_ANCHOR_DAY))
        for months in range(1, CalendarConstants.MONTHLY_HORIZON + 1)
    ]

    dates: list[date] = []
    for expiry in candidates:
        dte = (expiry - today).days
        if min_dte <= dte <= max_dte and expiry not in dates:
            dates.append(expiry)
        if len(dates) == CalendarConstants.MAX_EXPIRATIONS:
            break

    if not dates:
        logger.debug(f"No expirations between {min_dte} and {max_dte} DTE from {today}")
    return dates


def primary_expiry(min_dte: int, max_dte: int, today: date | None = None) -> date:
    """First calendar expiration, or the first Friday at least ``min_dte`` days out."""
    today = today or market_today()
    dates = get_expiration_dates(min_dte, max_dte, today)
    if dates:
        return dates[0]
    fallback = next_friday(today + timedelta(days=max(min_dte, 0)))
    logger.info(f"Expiration window {min_dte}-{max_dte} DTE is empty, using {fallback}")
    return fallback
