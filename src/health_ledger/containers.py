"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from health_ledger.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from health_ledger.adapters.supabase_record_repository import (
    glucose_repository,
    insulin_repository,
    medication_repository,
    pressure_repository,
)
from health_ledger.app_logging import configure_logging
from health_ledger.config import Settings
from health_ledger.services.calendar import LocalCalendarClock
from health_ledger.services.daily import DailyAggregator
from health_ledger.services.ledger import LedgerStores, MeasurementLedger
from health_ledger.services.suggestions import MedicationSuggestionRanker


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    clock: LocalCalendarClock
    ledger: MeasurementLedger
    suggestion_ranker: MedicationSuggestionRanker
    daily_aggregator: DailyAggregator


def build_supabase_stores(settings: Settings, clock: LocalCalendarClock) -> LedgerStores:
    """Create Supabase-backed stores for every record type."""
    client = create_client(settings.supabase_url, settings.supabase_service_key)
    return LedgerStores(
        glucose=glucose_repository(client, clock),
        pressure=pressure_repository(client, clock),
        insulin=insulin_repository(client, clock),
        medications=medication_repository(client, clock),
        profile=SupabaseProfileRepository(client),
    )


def build_container(
    settings: Settings | None = None,
    stores: LedgerStores | None = None,
    clock: LocalCalendarClock | None = None,
) -> AppContainer:
    """Create the default container and rehydrate the ledger from storage."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    resolved_clock = clock or LocalCalendarClock.for_zone(resolved_settings.timezone)
    resolved_stores = stores or build_supabase_stores(resolved_settings, resolved_clock)
    ledger = MeasurementLedger(
        stores=resolved_stores,
        clock=resolved_clock,
        persistence_mode=resolved_settings.persistence_mode,
    )
    ledger.load()
    return AppContainer(
        settings=resolved_settings,
        clock=resolved_clock,
        ledger=ledger,
        suggestion_ranker=MedicationSuggestionRanker(
            ledger=ledger, default_limit=resolved_settings.suggestion_limit
        ),
        daily_aggregator=DailyAggregator(ledger=ledger, clock=resolved_clock),
    )
