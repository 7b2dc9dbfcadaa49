"""Day-grouped views over the ledger."""

from dataclasses import dataclass
from datetime import date

from health_ledger.domain.daily import DayBucket, DayEntry
from health_ledger.domain.records import LedgerRecord
from health_ledger.services.calendar import LocalCalendarClock
from health_ledger.services.ledger import MeasurementLedger


@dataclass
class DailyAggregator:
    """Merges all record kinds into local-day buckets for presentation."""

    ledger: MeasurementLedger
    clock: LocalCalendarClock

    def aggregate(
        self,
        records: list[LedgerRecord],
        start_day: date | str,
        end_day: date | str,
    ) -> list[DayBucket]:
        """Group records by local day, newest day first and newest entry first.

        Only days that hold records are returned. Records outside the range
        are ignored.
        """
        start = self.clock.parse_day(start_day)
        end = self.clock.parse_day(end_day)
        grouped: dict[str, list[DayEntry]] = {}
        for record in records:
            moment = self.clock.resolve_local(record.instant)
            if not start <= moment.calendar_date <= end:
                continue
            grouped.setdefault(self.clock.day_key(moment), []).append(
                DayEntry(kind=record.kind, moment=moment, record=record)
            )
        return [
            DayBucket(
                day_key=day_key,
                day=date.fromisoformat(day_key),
                entries=sorted(
                    grouped[day_key], key=lambda entry: entry.moment, reverse=True
                ),
            )
            for day_key in sorted(grouped, reverse=True)
        ]

    def day_range(self, start_day: date | str, end_day: date | str) -> list[DayBucket]:
        """Return buckets for the ledger's records in an inclusive day range."""
        records = self.ledger.query_by_day_range(start_day, end_day)
        return self.aggregate(records, start_day, end_day)

    def entries_for_day(self, day: date | str) -> list[DayEntry]:
        buckets = self.day_range(day, day)
        return buckets[0].entries if buckets else []

    def today(self) -> list[DayEntry]:
        return self.entries_for_day(self.clock.today())
