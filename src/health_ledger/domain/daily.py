"""Domain models for day-grouped views."""

from dataclasses import dataclass
from datetime import date

from health_ledger.domain.calendar import LocalMoment
from health_ledger.domain.records import LedgerRecord, RecordKind


@dataclass(frozen=True)
class DayEntry:
    """A record placed at its local time within a day."""

    kind: RecordKind
    moment: LocalMoment
    record: LedgerRecord

    @property
    def time(self) -> str:
        return self.moment.time_label


@dataclass(frozen=True)
class DayBucket:
    """Every record whose local calendar day is ``day_key``, newest first."""

    day_key: str
    day: date
    entries: list[DayEntry]
