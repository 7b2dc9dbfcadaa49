"""Shared test fixtures."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from health_ledger.config import Settings
from health_ledger.domain.thresholds import UserProfile
from health_ledger.services.calendar import LocalCalendarClock
from health_ledger.services.ledger import (
    LedgerStores,
    MeasurementLedger,
    ProfileRepository,
    RecordRepository,
)

BUENOS_AIRES = "America/Argentina/Buenos_Aires"
FIXED_NOW = datetime(2025, 8, 22, 15, 0, tzinfo=UTC)


@dataclass
class InMemoryRecordRepository(RecordRepository):
    """In-memory record collection for tests."""

    records: list = field(default_factory=list)
    saves: int = 0

    def load_all(self) -> list:
        return list(self.records)

    def save_all(self, records: list) -> bool:
        self.records = list(records)
        self.saves += 1
        return True


@dataclass
class FailingRecordRepository(RecordRepository):
    """Record collection whose saves always fail."""

    records: list = field(default_factory=list)
    attempts: int = 0

    def load_all(self) -> list:
        return list(self.records)

    def save_all(self, records: list) -> bool:
        self.attempts += 1
        return False


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile store for tests."""

    profile: UserProfile | None = None

    def load_profile(self) -> UserProfile | None:
        return self.profile

    def save_profile(self, profile: UserProfile) -> bool:
        self.profile = profile
        return True


@dataclass
class FailingProfileRepository(ProfileRepository):
    """Profile store whose saves always fail."""

    profile: UserProfile | None = None
    attempts: int = 0

    def load_profile(self) -> UserProfile | None:
        return self.profile

    def save_profile(self, profile: UserProfile) -> bool:
        self.attempts += 1
        return False


def make_stores() -> LedgerStores:
    return LedgerStores(
        glucose=InMemoryRecordRepository(),
        pressure=InMemoryRecordRepository(),
        insulin=InMemoryRecordRepository(),
        medications=InMemoryRecordRepository(),
        profile=InMemoryProfileRepository(),
    )


def make_clock(timezone_name: str = BUENOS_AIRES) -> LocalCalendarClock:
    return LocalCalendarClock.for_zone(timezone_name, now_factory=lambda: FIXED_NOW)


def make_ledger(stores: LedgerStores | None = None, **kwargs) -> MeasurementLedger:
    ledger = MeasurementLedger(
        stores=stores or make_stores(), clock=make_clock(), **kwargs
    )
    ledger.load()
    return ledger


@pytest.fixture
def settings() -> Settings:
    return Settings(
        timezone=BUENOS_AIRES,
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
    )


@pytest.fixture
def clock() -> LocalCalendarClock:
    return make_clock()


@pytest.fixture
def stores() -> LedgerStores:
    return make_stores()


@pytest.fixture
def ledger(stores: LedgerStores) -> MeasurementLedger:
    return make_ledger(stores)


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("health_ledger")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
