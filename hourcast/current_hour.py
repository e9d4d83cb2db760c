"""Pick the hour closest to "now" and derive the page theme from it."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from hourcast.classifier import theme_tag
from hourcast.domain import HourRecord, ThemeTag


def _hour_of_day(now: datetime, record: HourRecord) -> int:
    """`now`'s hour, expressed in the record's offset when both are offset-aware."""
    record_tz = record.local_time.tzinfo
    if now.tzinfo is not None and record_tz is not None:
        return now.astimezone(record_tz).hour
    return now.hour


def select_current(records: Sequence[HourRecord], now: datetime | None = None) -> HourRecord | None:
    """
    Return the record whose hour-of-day is nearest to now's hour-of-day.

    Only the hour-of-day is compared, never the full timestamp, so 09:00
    tomorrow ties with 09:00 today; the earlier entry in `records` wins ties.
    """
    if not records:
        return None
    now = now or datetime.now()

    best: HourRecord | None = None
    best_diff: int | None = None
    for r in records:
        diff = abs(r.local_time.hour - _hour_of_day(now, r))
        if best_diff is None or diff < best_diff:
            best, best_diff = r, diff
    return best


def dominant_theme(records: Sequence[HourRecord], now: datetime | None = None) -> ThemeTag:
    """Theme of the current hour, or DEFAULT when there is nothing to show."""
    current = select_current(records, now)
    if current is None:
        return ThemeTag.DEFAULT
    return theme_tag(current.weather_code, current.temperature_f)
