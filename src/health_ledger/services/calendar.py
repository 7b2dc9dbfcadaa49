"""Resolution of stored timestamps into local calendar days.

Every timestamp the ledger handles goes through ``LocalCalendarClock``.
Zoned values are converted to the configured zone exactly once; naive
values are local wall-clock readings and are never shifted. Day keys are
read off the converted fields, never off the UTC date.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from health_ledger.domain.calendar import LocalMoment
from health_ledger.domain.errors import InvalidInput

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class LocalCalendarClock:
    """Clock bound to a single IANA time zone.

    ``now_factory`` must return an aware datetime.
    """

    timezone: ZoneInfo
    now_factory: Callable[[], datetime] = field(default=_utc_now)

    @classmethod
    def for_zone(
        cls, timezone_name: str, now_factory: Callable[[], datetime] = _utc_now
    ) -> "LocalCalendarClock":
        """Create a clock for a zone name, rejecting unknown zones."""
        try:
            timezone = ZoneInfo(timezone_name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise InvalidInput(
                "timezone", f"unknown time zone {timezone_name!r}"
            ) from exc
        return cls(timezone=timezone, now_factory=now_factory)

    def now(self) -> datetime:
        """Return the current instant in the local zone."""
        return self.now_factory().astimezone(self.timezone)

    def today(self) -> date:
        return self.now().date()

    def to_local(self, value: object) -> datetime:
        """Return an aware local datetime for a stored or supplied timestamp.

        Malformed input falls back to the current local time.
        """
        parsed = _parse_timestamp(value)
        if parsed is None:
            _logger.warning("Malformed timestamp %r; using current local time", value)
            return self.now()
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=self.timezone)
        return parsed.astimezone(self.timezone)

    def resolve_local(self, value: object) -> LocalMoment:
        """Return the local calendar fields of a timestamp."""
        local = self.to_local(value)
        return LocalMoment(
            year=local.year,
            month=local.month,
            day=local.day,
            hour=local.hour,
            minute=local.minute,
            second=local.second,
        )

    @staticmethod
    def day_key(moment: LocalMoment) -> str:
        """Return the YYYY-MM-DD key of a local moment."""
        return f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"

    def day_key_of(self, value: object) -> str:
        """Return the local day key of a timestamp."""
        return self.day_key(self.resolve_local(value))

    def parse_day(self, value: date | str) -> date:
        """Parse a local day given as a date or a YYYY-MM-DD string.

        Day bounds are caller input rather than stored data, so malformed
        values are rejected instead of replaced.
        """
        if isinstance(value, datetime):
            return self.resolve_local(value).calendar_date
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value.strip())
            except ValueError:
                pass
        raise InvalidInput("day", f"expected YYYY-MM-DD, got {value!r}")


def _parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    try:
        return datetime.fromisoformat(cleaned)
    except ValueError:
        return None
