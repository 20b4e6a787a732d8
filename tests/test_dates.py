from datetime import datetime, timedelta, timezone

import pytest

from app.utils.dates import Period, build_labels, bucketize, get_date_range, history_label, to_naive_utc

NOW = datetime(2024, 3, 15, 14, 30)


def test_week_range_covers_seven_days():
    start, end = get_date_range(Period.WEEK, NOW)

    assert start == datetime(2024, 3, 9)
    assert end == datetime(2024, 3, 15, 23, 59, 59, 999999)


def test_year_range_starts_on_first_of_month():
    start, _ = get_date_range(Period.YEAR, NOW)

    assert start == datetime(2023, 4, 1)


@pytest.mark.parametrize(
    "period, size, first, last",
    [
        (Period.WEEK, 7, "Sat", "Fri"),
        (Period.MONTH, 30, "Feb 15", "Mar 15"),
        (Period.YEAR, 12, "Apr", "Mar"),
    ],
)
def test_labels(period, size, first, last):
    labels = build_labels(period, NOW)

    assert len(labels) == size
    assert labels[0] == first
    assert labels[-1] == last


def test_bucketize_zero_fills_and_ignores_out_of_range():
    timestamps = [
        NOW,
        NOW - timedelta(hours=1),
        datetime(2024, 3, 9, 0, 0),
        datetime(2024, 3, 8, 23, 59),
    ]

    assert bucketize(Period.WEEK, timestamps, NOW) == [1, 0, 0, 0, 0, 0, 2]


def test_bucketize_year_groups_by_month():
    timestamps = [datetime(2023, 4, 30), datetime(2024, 3, 1), datetime(2024, 3, 14)]

    counts = bucketize(Period.YEAR, timestamps, NOW)

    assert counts[0] == 1
    assert counts[-1] == 2
    assert sum(counts) == 3


@pytest.mark.parametrize(
    "elapsed, label",
    [
        (timedelta(minutes=1), "Today"),
        (timedelta(hours=23, minutes=59), "Today"),
        (timedelta(hours=24), "Yesterday"),
        (timedelta(hours=47), "Yesterday"),
        (timedelta(hours=48), "Wednesday"),
    ],
)
def test_history_label(elapsed, label):
    assert history_label(NOW - elapsed, NOW) == label


def test_to_naive_utc():
    aware = datetime(2024, 3, 15, 16, 30, tzinfo=timezone(timedelta(hours=2)))

    assert to_naive_utc(aware) == datetime(2024, 3, 15, 14, 30)
    assert to_naive_utc(NOW) is NOW
    assert to_naive_utc(None) is None
