"""Local calendar value types."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True, order=True)
class LocalMoment:
    """Wall-clock fields of an instant in the configured local zone.

    Ordering compares fields from year down to second, which is local
    chronological order.
    """

    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int

    @property
    def calendar_date(self) -> date:
        return date(self.year, self.month, self.day)

    @property
    def time_label(self) -> str:
        """Return the local time as HH:MM."""
        return f"{self.hour:02d}:{self.minute:02d}"
