"""Unit tests for relative-time labels"""

from datetime import datetime, timedelta, timezone

import pytest

from credit_gateway.utils.date_utils import relative_time_label

NOW = datetime(2026, 3, 20, 15, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "age, label",
    [
        (timedelta(0), "Just now"),
        (timedelta(minutes=59), "Just now"),
        (timedelta(hours=1), "1 hour ago"),
        (timedelta(hours=5, minutes=30), "5 hours ago"),
        (timedelta(hours=23, minutes=59), "23 hours ago"),
        (timedelta(days=1), "Yesterday"),
        (timedelta(days=1, hours=23), "Yesterday"),
        (timedelta(days=2), "2 days ago"),
        (timedelta(days=6, hours=23), "6 days ago"),
        (timedelta(days=7), "1 week ago"),
        (timedelta(days=13), "1 week ago"),
        (timedelta(days=14), "2 weeks ago"),
        (timedelta(days=29), "4 weeks ago"),
    ],
)
def test_relative_time_label(age: timedelta, label: str):
    assert relative_time_label(NOW - age, NOW) == label


def test_relative_time_label_calendar_date_after_30_days():
    created_at = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
    assert relative_time_label(created_at, NOW) == "1/5/2026"


def test_relative_time_label_future_timestamp_is_just_now():
    assert relative_time_label(NOW + timedelta(minutes=5), NOW) == "Just now"
