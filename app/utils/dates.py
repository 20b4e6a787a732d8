"""Time helpers shared by the engagement analytics and watch history.

All timestamps are naive UTC, which is how they are stored.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta


class Period(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


PERIOD_BUCKETS = {
    Period.WEEK: 7,
    Period.MONTH: 30,
    Period.YEAR: 12,
}

LABEL_FORMATS = {
    Period.WEEK: "%a",
    Period.MONTH: "%b %d",
    Period.YEAR: "%b",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(moment: Optional[datetime]) -> Optional[datetime]:
    if moment is None or moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=59, microsecond=999999)


def get_date_range(period: Period, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    now = now or utcnow()
    end = end_of_day(now)
    start = start_of_day(now)

    if period == Period.WEEK:
        start -= timedelta(days=6)
    elif period == Period.MONTH:
        start -= timedelta(days=29)
    else:
        start = (start - relativedelta(months=11)).replace(day=1)

    return start, end


def _bucket_starts(period: Period, now: datetime) -> List[datetime]:
    start, _ = get_date_range(period, now)
    count = PERIOD_BUCKETS[period]
    if period == Period.YEAR:
        return [start + relativedelta(months=i) for i in range(count)]
    return [start + timedelta(days=i) for i in range(count)]


def bucket_key(period: Period, moment: datetime) -> str:
    if period == Period.YEAR:
        return moment.strftime("%Y-%m")
    return moment.strftime("%Y-%m-%d")


def build_labels(period: Period, now: Optional[datetime] = None) -> List[str]:
    now = now or utcnow()
    return [moment.strftime(LABEL_FORMATS[period]) for moment in _bucket_starts(period, now)]


def bucketize(period: Period, timestamps: Iterable[datetime], now: Optional[datetime] = None) -> List[int]:
    """Count timestamps per bucket; buckets without events stay at zero."""
    now = now or utcnow()
    counts: Dict[str, int] = {bucket_key(period, moment): 0 for moment in _bucket_starts(period, now)}
    for moment in timestamps:
        key = bucket_key(period, moment)
        if key in counts:
            counts[key] += 1
    return list(counts.values())


def history_label(watched_at: datetime, now: Optional[datetime] = None) -> str:
    now = now or utcnow()
    elapsed = now - watched_at
    if elapsed < timedelta(hours=24):
        return "Today"
    if elapsed < timedelta(hours=48):
        return "Yesterday"
    return watched_at.strftime("%A")
