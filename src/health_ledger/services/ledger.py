"""Measurement ledger: the single writer for every logged record."""

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import StrEnum
from typing import Protocol, TypeVar
from uuid import UUID, uuid4

from health_ledger.domain.classification import classify, classify_pressure
from health_ledger.domain.errors import InvalidInput, NotFound, PersistenceFailure
from health_ledger.domain.records import (
    FoodRelation,
    GlucoseContext,
    GlucoseMeasurement,
    InsulinContext,
    InsulinEntry,
    InsulinType,
    LedgerRecord,
    MedicationRecord,
    PressureMeasurement,
    RecordKind,
)
from health_ledger.domain.thresholds import (
    DEFAULT_PROFILE,
    Band,
    UserProfile,
    UserThresholds,
)
from health_ledger.services.calendar import LocalCalendarClock

GLUCOSE_MAX = 1000
SYSTOLIC_MAX = 300
DIASTOLIC_MAX = 200
INSULIN_DOSE_MAX = 100

RecordT = TypeVar("RecordT")
EnumT = TypeVar("EnumT", bound=StrEnum)

_logger = logging.getLogger(__name__)


class RecordRepository(Protocol[RecordT]):
    """Persistence interface for one record type."""

    def load_all(self) -> list[RecordT]:
        """Return every stored record, or an empty list for an empty store."""

    def save_all(self, records: list[RecordT]) -> bool:
        """Replace the stored collection and return True on success."""


class ProfileRepository(Protocol):
    """Persistence interface for the user profile."""

    def load_profile(self) -> UserProfile | None:
        """Return the stored profile, if any."""

    def save_profile(self, profile: UserProfile) -> bool:
        """Store the profile and return True on success."""


class PersistenceMode(StrEnum):
    """When a mutation is applied relative to its save."""

    WRITE_AFTER = "write_after"
    WRITE_AHEAD = "write_ahead"


@dataclass
class LedgerStores:
    """Storage collaborators, one per record type."""

    glucose: RecordRepository[GlucoseMeasurement]
    pressure: RecordRepository[PressureMeasurement]
    insulin: RecordRepository[InsulinEntry]
    medications: RecordRepository[MedicationRecord]
    profile: ProfileRepository

    def for_kind(self, kind: RecordKind) -> RecordRepository:
        return {
            RecordKind.GLUCOSE: self.glucose,
            RecordKind.PRESSURE: self.pressure,
            RecordKind.INSULIN: self.insulin,
            RecordKind.MEDICATION: self.medications,
        }[kind]


_Collection = dict[UUID, LedgerRecord]


@dataclass
class MeasurementLedger:
    """Owns all records and a day-bucket index keyed by local day.

    Mutations are serialized by the caller: each one finishes, including its
    save, before the next starts. Reads always reflect the last completed
    mutation.
    """

    stores: LedgerStores
    clock: LocalCalendarClock
    persistence_mode: PersistenceMode = PersistenceMode.WRITE_AFTER
    profile: UserProfile = field(init=False, default=DEFAULT_PROFILE)
    _collections: dict[RecordKind, _Collection] = field(init=False, repr=False)
    _day_index: dict[str, dict[UUID, RecordKind]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._collections = {kind: {} for kind in RecordKind}
        self._day_index = {}

    @property
    def thresholds(self) -> UserThresholds:
        return self.profile.thresholds

    def load(self) -> None:
        """Rebuild all state by replaying the stored records."""
        self.profile = self.stores.profile.load_profile() or DEFAULT_PROFILE
        self._collections = {kind: {} for kind in RecordKind}
        self._day_index = {}
        for kind in RecordKind:
            for record in self.stores.for_kind(kind).load_all():
                restored = self._reclassify(self._localize(record), self.thresholds)
                if restored.id in self._collections[kind]:
                    _logger.warning("Duplicate %s record id=%s", kind, restored.id)
                    self._unindex(self._collections[kind][restored.id])
                self._collections[kind][restored.id] = restored
                self._index(restored)
        _logger.info(
            "Ledger loaded: %s",
            ", ".join(f"{kind}={len(self._collections[kind])}" for kind in RecordKind),
        )

    # Reads

    def glucose(self) -> list[GlucoseMeasurement]:
        return list(self._collections[RecordKind.GLUCOSE].values())

    def pressure(self) -> list[PressureMeasurement]:
        return list(self._collections[RecordKind.PRESSURE].values())

    def insulin(self) -> list[InsulinEntry]:
        return list(self._collections[RecordKind.INSULIN].values())

    def medications(self) -> list[MedicationRecord]:
        return list(self._collections[RecordKind.MEDICATION].values())

    def records(self) -> list[LedgerRecord]:
        """Return every record of every kind."""
        return [
            record
            for kind in RecordKind
            for record in self._collections[kind].values()
        ]

    def get(self, kind: RecordKind, record_id: UUID | str) -> LedgerRecord:
        """Return a record by kind and id, raising NotFound when absent."""
        return self._require(kind, record_id)

    def day_keys(self) -> list[str]:
        """Return the local days that hold at least one record, newest first."""
        return sorted(self._day_index, reverse=True)

    def query_by_day_range(
        self, start_day: date | str, end_day: date | str
    ) -> list[LedgerRecord]:
        """Return every record whose local day falls in the inclusive range."""
        start = self.clock.parse_day(start_day)
        end = self.clock.parse_day(end_day)
        if start > end:
            raise InvalidInput("start_day", "must not be after end_day")
        results: list[LedgerRecord] = []
        for day_key in sorted(self._day_index):
            if not start <= date.fromisoformat(day_key) <= end:
                continue
            for record_id, kind in self._day_index[day_key].items():
                results.append(self._collections[kind][record_id])
        return results

    # Glucose

    def add_glucose(
        self,
        value: object,
        context: GlucoseContext | str,
        instant: object | None = None,
    ) -> GlucoseMeasurement:
        """Log a glucose reading classified against the current thresholds."""
        checked_value = _require_measure("value", value, GLUCOSE_MAX)
        checked_context = _require_choice(GlucoseContext, "context", context)
        record = GlucoseMeasurement(
            id=uuid4(),
            instant=self._resolve_instant(instant),
            value=checked_value,
            context=checked_context,
            status=classify(checked_value, self.thresholds.glucose),
        )
        self._commit({RecordKind.GLUCOSE: self._with(record)}, record)
        return record

    def edit_glucose(
        self,
        record_id: UUID | str,
        *,
        value: object | None = None,
        context: GlucoseContext | str | None = None,
        instant: object | None = None,
    ) -> GlucoseMeasurement:
        """Update fields of a glucose reading; the status follows the value."""
        current = self._require(RecordKind.GLUCOSE, record_id)
        new_value = (
            current.value
            if value is None
            else _require_measure("value", value, GLUCOSE_MAX)
        )
        record = replace(
            current,
            value=new_value,
            context=(
                current.context
                if context is None
                else _require_choice(GlucoseContext, "context", context)
            ),
            instant=current.instant if instant is None else self._resolve_instant(instant),
            status=classify(new_value, self.thresholds.glucose),
        )
        self._commit({RecordKind.GLUCOSE: self._with(record)}, record)
        return record

    def delete_glucose(self, record_id: UUID | str) -> None:
        self._delete(RecordKind.GLUCOSE, record_id)

    # Pressure

    def add_pressure(
        self, systolic: object, diastolic: object, instant: object | None = None
    ) -> PressureMeasurement:
        """Log a blood pressure reading classified on both components."""
        checked_systolic, checked_diastolic = _require_pressure(systolic, diastolic)
        record = PressureMeasurement(
            id=uuid4(),
            instant=self._resolve_instant(instant),
            systolic=checked_systolic,
            diastolic=checked_diastolic,
            status=classify_pressure(
                checked_systolic, checked_diastolic, self.thresholds
            ),
        )
        self._commit({RecordKind.PRESSURE: self._with(record)}, record)
        return record

    def edit_pressure(
        self,
        record_id: UUID | str,
        *,
        systolic: object | None = None,
        diastolic: object | None = None,
        instant: object | None = None,
    ) -> PressureMeasurement:
        """Update a pressure reading, validating the resulting pair jointly."""
        current = self._require(RecordKind.PRESSURE, record_id)
        checked_systolic, checked_diastolic = _require_pressure(
            current.systolic if systolic is None else systolic,
            current.diastolic if diastolic is None else diastolic,
        )
        record = replace(
            current,
            systolic=checked_systolic,
            diastolic=checked_diastolic,
            instant=current.instant if instant is None else self._resolve_instant(instant),
            status=classify_pressure(
                checked_systolic, checked_diastolic, self.thresholds
            ),
        )
        self._commit({RecordKind.PRESSURE: self._with(record)}, record)
        return record

    def delete_pressure(self, record_id: UUID | str) -> None:
        self._delete(RecordKind.PRESSURE, record_id)

    # Insulin

    def add_insulin(  # noqa: PLR0913
        self,
        dose: object,
        insulin_type: InsulinType | str,
        context: InsulinContext | str,
        notes: str | None = None,
        instant: object | None = None,
    ) -> InsulinEntry:
        """Log an insulin dose in units."""
        record = InsulinEntry(
            id=uuid4(),
            instant=self._resolve_instant(instant),
            dose=_require_measure("dose", dose, INSULIN_DOSE_MAX),
            insulin_type=_require_choice(InsulinType, "insulin_type", insulin_type),
            context=_require_choice(InsulinContext, "context", context),
            notes=_clean_notes(notes),
        )
        self._commit({RecordKind.INSULIN: self._with(record)}, record)
        return record

    def edit_insulin(  # noqa: PLR0913
        self,
        record_id: UUID | str,
        *,
        dose: object | None = None,
        insulin_type: InsulinType | str | None = None,
        context: InsulinContext | str | None = None,
        notes: str | None = None,
        instant: object | None = None,
    ) -> InsulinEntry:
        """Update an insulin entry. An empty ``notes`` string clears the notes."""
        current = self._require(RecordKind.INSULIN, record_id)
        record = replace(
            current,
            dose=(
                current.dose
                if dose is None
                else _require_measure("dose", dose, INSULIN_DOSE_MAX)
            ),
            insulin_type=(
                current.insulin_type
                if insulin_type is None
                else _require_choice(InsulinType, "insulin_type", insulin_type)
            ),
            context=(
                current.context
                if context is None
                else _require_choice(InsulinContext, "context", context)
            ),
            notes=current.notes if notes is None else _clean_notes(notes),
            instant=current.instant if instant is None else self._resolve_instant(instant),
        )
        self._commit({RecordKind.INSULIN: self._with(record)}, record)
        return record

    def delete_insulin(self, record_id: UUID | str) -> None:
        self._delete(RecordKind.INSULIN, record_id)

    # Medications

    def add_medication_intake(
        self,
        name: str,
        food_relation: FoodRelation | str,
        instant: object | None = None,
    ) -> MedicationRecord:
        """Record an intake, reusing the record that matches the name.

        A match increments the usage count and sets the last use to this
        intake's instant; the stored display name keeps its original casing.
        """
        checked_name = _require_name(name)
        checked_relation = _require_choice(FoodRelation, "food_relation", food_relation)
        used_at = self._resolve_instant(instant)
        existing = self._find_medication(checked_name)
        if existing is None:
            record = MedicationRecord(
                id=uuid4(),
                name=checked_name,
                food_relation=checked_relation,
                usage_count=1,
                last_used_at=used_at,
            )
        else:
            record = replace(
                existing,
                food_relation=checked_relation,
                usage_count=existing.usage_count + 1,
                last_used_at=used_at,
            )
        self._commit({RecordKind.MEDICATION: self._with(record)}, record)
        return record

    def edit_medication(
        self,
        record_id: UUID | str,
        *,
        name: str | None = None,
        food_relation: FoodRelation | str | None = None,
        instant: object | None = None,
    ) -> MedicationRecord:
        """Update a medication record; ``instant`` replaces the last use."""
        current = self._require(RecordKind.MEDICATION, record_id)
        new_name = current.name
        if name is not None:
            new_name = _require_name(name)
            clash = self._find_medication(new_name)
            if clash is not None and clash.id != current.id:
                raise InvalidInput("name", f"medication {clash.name!r} already exists")
        record = replace(
            current,
            name=new_name,
            food_relation=(
                current.food_relation
                if food_relation is None
                else _require_choice(FoodRelation, "food_relation", food_relation)
            ),
            last_used_at=(
                current.last_used_at
                if instant is None
                else self._resolve_instant(instant)
            ),
        )
        self._commit({RecordKind.MEDICATION: self._with(record)}, record)
        return record

    def delete_medication(self, record_id: UUID | str) -> None:
        self._delete(RecordKind.MEDICATION, record_id)

    # Profile

    def update_profile(
        self,
        *,
        name: str | None = None,
        thresholds: UserThresholds | None = None,
    ) -> UserProfile:
        """Update the profile and reclassify every measurement."""
        if thresholds is not None:
            _require_thresholds(thresholds)
        profile = replace(
            self.profile,
            name=self.profile.name if name is None else name.strip(),
            thresholds=self.profile.thresholds if thresholds is None else thresholds,
        )
        changes = {
            kind: {
                record_id: self._reclassify(record, profile.thresholds)
                for record_id, record in self._collections[kind].items()
            }
            for kind in (RecordKind.GLUCOSE, RecordKind.PRESSURE)
        }
        if self.persistence_mode is PersistenceMode.WRITE_AHEAD:
            # Stored profile must never be newer than the stored statuses.
            for kind, collection in changes.items():
                self._save(kind, collection, None)
            self._save_profile(profile)
            for kind, collection in changes.items():
                self._apply(kind, collection)
            self.profile = profile
        else:
            self.profile = profile
            self._commit(changes, None)
            self._save_profile(profile)
        return profile

    def update_thresholds(self, thresholds: UserThresholds) -> UserProfile:
        return self.update_profile(thresholds=thresholds)

    # Internals

    def _resolve_instant(self, instant: object | None) -> datetime:
        if instant is None:
            return self.clock.now()
        return self.clock.to_local(instant)

    def _require(self, kind: RecordKind, record_id: UUID | str):  # noqa: ANN202
        try:
            key = record_id if isinstance(record_id, UUID) else UUID(str(record_id))
        except ValueError as exc:
            raise NotFound(kind, record_id) from exc
        record = self._collections[kind].get(key)
        if record is None:
            raise NotFound(kind, record_id)
        return record

    def _find_medication(self, name: str) -> MedicationRecord | None:
        folded = name.casefold()
        for record in self._collections[RecordKind.MEDICATION].values():
            if record.name.casefold() == folded:
                return record
        return None

    def _with(self, record: LedgerRecord) -> _Collection:
        updated = dict(self._collections[record.kind])
        updated[record.id] = record
        return updated

    def _delete(self, kind: RecordKind, record_id: UUID | str) -> None:
        record = self._require(kind, record_id)
        updated = dict(self._collections[kind])
        del updated[record.id]
        self._commit({kind: updated}, record)

    def _commit(
        self, changes: dict[RecordKind, _Collection], record: LedgerRecord | None
    ) -> None:
        if self.persistence_mode is PersistenceMode.WRITE_AHEAD:
            for kind, collection in changes.items():
                self._save(kind, collection, None)
            for kind, collection in changes.items():
                self._apply(kind, collection)
            return
        for kind, collection in changes.items():
            self._apply(kind, collection)
        for kind, collection in changes.items():
            self._save(kind, collection, record)

    def _apply(self, kind: RecordKind, collection: _Collection) -> None:
        previous = self._collections[kind]
        for record_id, record in previous.items():
            if collection.get(record_id) is not record:
                self._unindex(record)
        for record_id, record in collection.items():
            if previous.get(record_id) is not record:
                self._index(record)
        self._collections[kind] = collection

    def _save(
        self,
        kind: RecordKind,
        collection: _Collection,
        applied: LedgerRecord | None,
    ) -> None:
        try:
            saved = self.stores.for_kind(kind).save_all(list(collection.values()))
        except Exception as exc:
            _logger.exception("Saving %s records raised", kind)
            raise PersistenceFailure(kind, applied) from exc
        if not saved:
            _logger.error("Saving %s records failed", kind)
            raise PersistenceFailure(kind, applied)

    def _save_profile(self, profile: UserProfile) -> None:
        try:
            saved = self.stores.profile.save_profile(profile)
        except Exception as exc:
            _logger.exception("Saving profile raised")
            raise PersistenceFailure("profile", None) from exc
        if not saved:
            _logger.error("Saving profile failed")
            raise PersistenceFailure("profile", None)

    def _index(self, record: LedgerRecord) -> None:
        day_key = self.clock.day_key_of(record.instant)
        self._day_index.setdefault(day_key, {})[record.id] = record.kind

    def _unindex(self, record: LedgerRecord) -> None:
        day_key = self.clock.day_key_of(record.instant)
        bucket = self._day_index.get(day_key)
        if bucket is None:
            return
        bucket.pop(record.id, None)
        if not bucket:
            del self._day_index[day_key]

    def _localize(self, record: LedgerRecord) -> LedgerRecord:
        if isinstance(record, MedicationRecord):
            return replace(record, last_used_at=self.clock.to_local(record.last_used_at))
        return replace(record, instant=self.clock.to_local(record.instant))

    @staticmethod
    def _reclassify(record: LedgerRecord, thresholds: UserThresholds) -> LedgerRecord:
        if isinstance(record, GlucoseMeasurement):
            return replace(record, status=classify(record.value, thresholds.glucose))
        if isinstance(record, PressureMeasurement):
            return replace(
                record,
                status=classify_pressure(record.systolic, record.diastolic, thresholds),
            )
        return record


def _require_measure(field_name: str, value: object, upper: float) -> float:
    if isinstance(value, bool):
        raise InvalidInput(field_name, "must be a number")
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", "."))
        except ValueError as exc:
            raise InvalidInput(field_name, "must be a number") from exc
    else:
        raise InvalidInput(field_name, "must be a number")
    if not math.isfinite(number):
        raise InvalidInput(field_name, "must be a finite number")
    if number <= 0:
        raise InvalidInput(field_name, "must be positive")
    if number > upper:
        raise InvalidInput(field_name, f"must not exceed {upper}")
    return number


def _require_pressure(systolic: object, diastolic: object) -> tuple[float, float]:
    checked_systolic = _require_measure("systolic", systolic, SYSTOLIC_MAX)
    checked_diastolic = _require_measure("diastolic", diastolic, DIASTOLIC_MAX)
    if checked_diastolic > checked_systolic:
        raise InvalidInput("diastolic", "must not exceed systolic")
    return checked_systolic, checked_diastolic


def _require_choice(enum_type: type[EnumT], field_name: str, value: object) -> EnumT:
    if isinstance(value, str):
        value = value.strip().lower()
    try:
        return enum_type(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_type)
        raise InvalidInput(field_name, f"must be one of: {allowed}") from exc


def _require_name(name: object) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidInput("name", "must not be blank")
    return name.strip()


def _clean_notes(notes: str | None) -> str | None:
    if notes is None:
        return None
    cleaned = notes.strip()
    return cleaned or None


def _require_thresholds(thresholds: UserThresholds) -> None:
    bands: dict[str, Band] = {
        "glucose": thresholds.glucose,
        "systolic": thresholds.systolic,
        "diastolic": thresholds.diastolic,
    }
    for field_name, band in bands.items():
        if band.minimum <= 0:
            raise InvalidInput(field_name, "minimum must be positive")
        if band.minimum >= band.maximum:
            raise InvalidInput(field_name, "minimum must be below maximum")
