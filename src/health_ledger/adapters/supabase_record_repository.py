"""Supabase-backed record collections, one table per record type."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar
from uuid import UUID

from supabase import Client

from health_ledger.domain.records import (
    FoodRelation,
    GlucoseContext,
    GlucoseMeasurement,
    InsulinContext,
    InsulinEntry,
    InsulinType,
    MedicationRecord,
    PressureMeasurement,
    Status,
)
from health_ledger.services.calendar import LocalCalendarClock

RecordT = TypeVar(
    "RecordT", GlucoseMeasurement, PressureMeasurement, InsulinEntry, MedicationRecord
)

Row = dict[str, object]

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseRecordRepository(Generic[RecordT]):
    """Stores a whole record collection in a table.

    Rows carry a ``position`` column so reloads keep insertion order.
    """

    client: Client
    table: str
    to_row: Callable[[RecordT], Row]
    from_row: Callable[[Row], RecordT]

    def load_all(self) -> list[RecordT]:
        """Return every stored record in insertion order."""
        response = self.client.table(self.table).select("*").order("position").execute()
        return [self.from_row(row) for row in response.data or []]

    def save_all(self, records: list[RecordT]) -> bool:
        """Upsert the collection and delete rows no longer in it."""
        rows = [
            {**self.to_row(record), "position": position}
            for position, record in enumerate(records)
        ]
        ids = [str(row["id"]) for row in rows]
        try:
            if rows:
                response = self.client.table(self.table).upsert(rows).execute()
                if not response.data:
                    _logger.error("Upsert to %s returned no rows", self.table)
                    return False
                self.client.table(self.table).delete().not_.in_("id", ids).execute()
            else:
                self.client.table(self.table).delete().not_.is_("id", "null").execute()
        except Exception:
            _logger.exception("Failed to save %s rows to %s", len(rows), self.table)
            return False
        return True


def glucose_repository(
    client: Client, clock: LocalCalendarClock
) -> SupabaseRecordRepository[GlucoseMeasurement]:
    return SupabaseRecordRepository(
        client=client,
        table="glucose_measurements",
        to_row=_glucose_row,
        from_row=lambda row: GlucoseMeasurement(
            id=UUID(str(row["id"])),
            instant=clock.to_local(row.get("instant")),
            value=float(row["value"]),
            context=GlucoseContext(str(row["context"]).lower()),
            status=Status(row.get("status") or Status.NORMAL),
        ),
    )


def pressure_repository(
    client: Client, clock: LocalCalendarClock
) -> SupabaseRecordRepository[PressureMeasurement]:
    return SupabaseRecordRepository(
        client=client,
        table="pressure_measurements",
        to_row=_pressure_row,
        from_row=lambda row: PressureMeasurement(
            id=UUID(str(row["id"])),
            instant=clock.to_local(row.get("instant")),
            systolic=float(row["systolic"]),
            diastolic=float(row["diastolic"]),
            status=Status(row.get("status") or Status.NORMAL),
        ),
    )


def insulin_repository(
    client: Client, clock: LocalCalendarClock
) -> SupabaseRecordRepository[InsulinEntry]:
    return SupabaseRecordRepository(
        client=client,
        table="insulin_entries",
        to_row=_insulin_row,
        from_row=lambda row: InsulinEntry(
            id=UUID(str(row["id"])),
            instant=clock.to_local(row.get("instant")),
            dose=float(row["dose"]),
            insulin_type=InsulinType(row["insulin_type"]),
            context=InsulinContext(row["context"]),
            notes=row.get("notes") or None,
        ),
    )


def medication_repository(
    client: Client, clock: LocalCalendarClock
) -> SupabaseRecordRepository[MedicationRecord]:
    return SupabaseRecordRepository(
        client=client,
        table="medications",
        to_row=_medication_row,
        from_row=lambda row: MedicationRecord(
            id=UUID(str(row["id"])),
            name=str(row.get("name", "")),
            food_relation=FoodRelation(row.get("food_relation") or FoodRelation.NONE),
            usage_count=int(row.get("usage_count", 1)),
            last_used_at=clock.to_local(row.get("last_used_at")),
        ),
    )


def _glucose_row(record: GlucoseMeasurement) -> Row:
    return {
        "id": str(record.id),
        "instant": record.instant.isoformat(),
        "value": record.value,
        "context": record.context.value,
        "status": record.status.value,
    }


def _pressure_row(record: PressureMeasurement) -> Row:
    return {
        "id": str(record.id),
        "instant": record.instant.isoformat(),
        "systolic": record.systolic,
        "diastolic": record.diastolic,
        "status": record.status.value,
    }


def _insulin_row(record: InsulinEntry) -> Row:
    return {
        "id": str(record.id),
        "instant": record.instant.isoformat(),
        "dose": record.dose,
        "insulin_type": record.insulin_type.value,
        "context": record.context.value,
        "notes": record.notes,
    }


def _medication_row(record: MedicationRecord) -> Row:
    return {
        "id": str(record.id),
        "name": record.name,
        "food_relation": record.food_relation.value,
        "usage_count": record.usage_count,
        "last_used_at": record.last_used_at.isoformat(),
    }
