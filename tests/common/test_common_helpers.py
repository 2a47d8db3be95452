from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from attendance_tracker.common.datetime_utils import (
    calendar_day,
    day_window,
    isoformat_utc,
    iter_days,
    parse_iso_date,
    parse_iso_datetime,
)
from attendance_tracker.common.errors import status_for
from attendance_tracker.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    IdentityProviderUnavailableError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from attendance_tracker.core.enums import Role
from attendance_tracker.realtime.publisher import AttendanceEvents
from attendance_tracker.realtime.topics import attendance_audience, identity_topic, role_topic


def test_calendar_day_is_utc():
    late_evening_in_new_york = parse_iso_datetime("2024-03-10T23:30:00-05:00")
    assert calendar_day(late_evening_in_new_york) == date(2024, 3, 11)


def test_day_window_is_half_open():
    start, end = day_window(date(2024, 3, 10))
    assert start == datetime(2024, 3, 10, tzinfo=timezone.utc)
    assert end == datetime(2024, 3, 11, tzinfo=timezone.utc)


def test_parse_iso_date_accepts_dates_and_timestamps():
    assert parse_iso_date("2024-03-10") == date(2024, 3, 10)
    assert parse_iso_date("2024-03-10T22:00:00Z") == date(2024, 3, 10)
    with pytest.raises(ValidationError):
        parse_iso_date("10/03/2024")


def test_iso_parsers_reject_non_strings():
    with pytest.raises(ValidationError) as exc:
        parse_iso_datetime(20240301)
    assert exc.value.errors == [{"field": "date", "message": "expected an ISO-8601 string"}]
    with pytest.raises(ValidationError) as exc:
        parse_iso_date(["2024-03-10"], "endDate")
    assert exc.value.errors[0]["field"] == "endDate"


def test_isoformat_utc_uses_z_suffix():
    assert isoformat_utc(datetime(2024, 3, 10, 8, 5, tzinfo=timezone.utc)) == "2024-03-10T08:05:00.000Z"
    assert isoformat_utc(None) is None


def test_iter_days_is_inclusive():
    assert list(iter_days(date(2024, 2, 28), date(2024, 3, 1))) == [
        date(2024, 2, 28),
        date(2024, 2, 29),
        date(2024, 3, 1),
    ]


@pytest.mark.parametrize(
    "error, status",
    [
        (AuthenticationError("x"), 401),
        (AuthorizationError("x"), 403),
        (NotFoundError("x"), 404),
        (ValidationError("x"), 400),
        (ConflictError("x"), 400),
        (StorageUnavailableError("x"), 503),
        (IdentityProviderUnavailableError("x"), 503),
        (DomainError("x"), 500),
    ],
)
def test_error_status_mapping(error, status):
    assert status_for(error) == status


def test_topics():
    assert role_topic(Role.TEACHER) == "role:teacher"
    assert identity_topic(7) == "identity:7"
    assert attendance_audience(7) == ["role:admin", "role:teacher", "identity:7"]


def test_publish_failure_does_not_break_the_write(caplog):
    class Broken:
        def publish(self, event, payload, topics):
            raise RuntimeError("socket server gone")

    AttendanceEvents(Broken()).deleted(3, 7)

    assert "Failed to publish attendance:delete" in caplog.text
