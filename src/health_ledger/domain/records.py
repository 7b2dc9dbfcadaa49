"""Domain models for logged health records."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import ClassVar
from uuid import UUID


class RecordKind(StrEnum):
    """Closed set of record variants kept by the ledger."""

    GLUCOSE = "glucose"
    PRESSURE = "pressure"
    INSULIN = "insulin"
    MEDICATION = "medication"


class Status(StrEnum):
    """Classification band of a measurement against personal thresholds."""

    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


class GlucoseContext(StrEnum):
    FASTING = "fasting"
    POSTPRANDIAL = "postprandial"
    CUSTOM = "custom"


class InsulinType(StrEnum):
    RAPID = "rapid"
    LONG = "long"
    MIXED = "mixed"


class InsulinContext(StrEnum):
    FASTING = "fasting"
    POSTPRANDIAL = "postprandial"
    CORRECTION = "correction"


class FoodRelation(StrEnum):
    BEFORE = "before"
    DURING = "during"
    AFTER = "after"
    NONE = "none"


@dataclass(frozen=True)
class GlucoseMeasurement:
    """Blood glucose reading in mg/dL."""

    kind: ClassVar[RecordKind] = RecordKind.GLUCOSE

    id: UUID
    instant: datetime
    value: float
    context: GlucoseContext
    status: Status


@dataclass(frozen=True)
class PressureMeasurement:
    """Blood pressure reading in mmHg."""

    kind: ClassVar[RecordKind] = RecordKind.PRESSURE

    id: UUID
    instant: datetime
    systolic: float
    diastolic: float
    status: Status


@dataclass(frozen=True)
class InsulinEntry:
    """Insulin dose in units. Insulin carries no status band."""

    kind: ClassVar[RecordKind] = RecordKind.INSULIN

    id: UUID
    instant: datetime
    dose: float
    insulin_type: InsulinType
    context: InsulinContext
    notes: str | None = None


@dataclass(frozen=True)
class MedicationRecord:
    """A medication the user takes, unique by case-insensitive name."""

    kind: ClassVar[RecordKind] = RecordKind.MEDICATION

    id: UUID
    name: str
    food_relation: FoodRelation
    usage_count: int
    last_used_at: datetime

    @property
    def instant(self) -> datetime:
        """Return the moment of the latest intake."""
        return self.last_used_at


LedgerRecord = GlucoseMeasurement | PressureMeasurement | InsulinEntry | MedicationRecord
