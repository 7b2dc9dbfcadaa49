"""Tests for local calendar resolution."""

import logging
from datetime import UTC, date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from health_ledger.domain.calendar import LocalMoment
from health_ledger.domain.errors import InvalidInput
from health_ledger.services.calendar import LocalCalendarClock
from tests.conftest import make_clock


@pytest.mark.parametrize(
    ("timestamp", "expected_day", "expected_time"),
    [
        ("2025-08-22T01:39:00.000Z", "2025-08-21", "22:39"),
        ("2025-08-20T02:24:00.000Z", "2025-08-19", "23:24"),
        ("2025-08-22T02:32:00.000Z", "2025-08-21", "23:32"),
        ("2025-08-22T10:47:00.000Z", "2025-08-22", "07:47"),
    ],
)
def test_utc_instants_bucket_into_local_day(
    timestamp: str, expected_day: str, expected_time: str
) -> None:
    clock = make_clock()

    moment = clock.resolve_local(timestamp)

    assert clock.day_key(moment) == expected_day
    assert moment.time_label == expected_time


def test_naive_string_is_read_as_local_wall_time() -> None:
    clock = make_clock()

    moment = clock.resolve_local("2025-01-22T10:30")

    assert moment == LocalMoment(2025, 1, 22, 10, 30, 0)
    assert clock.day_key(moment) == "2025-01-22"


def test_late_local_evening_stays_on_its_day() -> None:
    clock = make_clock()

    assert clock.day_key_of("2025-08-21T23:59:59") == "2025-08-21"


def test_aware_datetime_is_converted_once() -> None:
    clock = make_clock()
    instant = datetime(2025, 8, 22, 1, 39, tzinfo=UTC)

    local = clock.to_local(instant)
    again = clock.to_local(local)

    assert local.hour == 22
    assert again == local
    assert again.hour == 22
    assert clock.day_key_of(again) == "2025-08-21"


def test_other_offsets_convert_to_configured_zone() -> None:
    clock = make_clock()
    instant = datetime(2025, 8, 22, 3, 0, tzinfo=timezone(timedelta(hours=2)))

    assert clock.resolve_local(instant) == LocalMoment(2025, 8, 21, 22, 0, 0)


def test_naive_datetime_is_not_shifted() -> None:
    clock = make_clock()

    local = clock.to_local(datetime(2025, 8, 22, 1, 39))

    assert local.hour == 1
    assert local.tzinfo == ZoneInfo("America/Argentina/Buenos_Aires")


def test_day_key_uses_the_instants_own_dst_offset() -> None:
    clock = make_clock("Europe/Madrid")

    winter = clock.resolve_local("2025-01-15T23:30:00Z")
    summer = clock.resolve_local("2025-07-15T22:30:00Z")

    assert clock.day_key(winter) == "2025-01-16"
    assert winter.time_label == "00:30"
    assert clock.day_key(summer) == "2025-07-16"
    assert summer.time_label == "00:30"


@pytest.mark.parametrize("malformed", ["not a date", "", "2025-13-45T99:99", None, 42])
def test_malformed_timestamp_falls_back_to_now(
    malformed: object, caplog: pytest.LogCaptureFixture
) -> None:
    clock = make_clock()

    with caplog.at_level(logging.WARNING):
        moment = clock.resolve_local(malformed)

    assert moment == LocalMoment(2025, 8, 22, 12, 0, 0)
    assert "Malformed timestamp" in caplog.text


def test_day_key_is_zero_padded() -> None:
    assert LocalCalendarClock.day_key(LocalMoment(987, 3, 4, 5, 6, 7)) == "0987-03-04"


def test_parse_day_accepts_dates_and_strings() -> None:
    clock = make_clock()

    assert clock.parse_day("2025-08-21") == date(2025, 8, 21)
    assert clock.parse_day(date(2025, 8, 21)) == date(2025, 8, 21)
    assert clock.parse_day(datetime(2025, 8, 22, 1, 39, tzinfo=UTC)) == date(
        2025, 8, 21
    )


def test_parse_day_rejects_malformed_bounds() -> None:
    with pytest.raises(InvalidInput):
        make_clock().parse_day("21/08/2025")


def test_unknown_zone_is_rejected() -> None:
    with pytest.raises(InvalidInput):
        LocalCalendarClock.for_zone("Mars/Olympus_Mons")


def test_today_uses_local_date() -> None:
    clock = LocalCalendarClock.for_zone(
        "America/Argentina/Buenos_Aires",
        now_factory=lambda: datetime(2025, 8, 22, 1, 0, tzinfo=UTC),
    )

    assert clock.today() == date(2025, 8, 21)
