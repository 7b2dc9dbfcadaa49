"""Medication name suggestions ranked by usage."""

from dataclasses import dataclass

from health_ledger.domain.errors import InvalidInput
from health_ledger.domain.records import MedicationRecord
from health_ledger.services.ledger import MeasurementLedger


@dataclass(frozen=True)
class MedicationSuggestion:
    """A medication name offered while the user types."""

    name: str
    usage_count: int


@dataclass
class MedicationSuggestionRanker:
    """Suggests medication names from the ledger's medication records."""

    ledger: MeasurementLedger
    default_limit: int = 5

    def suggest(
        self, query: str | None = "", limit: int | None = None
    ) -> list[MedicationSuggestion]:
        """Return names containing ``query`` (case-insensitive), best first.

        An empty query returns the top records unfiltered.
        """
        resolved_limit = self.default_limit if limit is None else limit
        if resolved_limit < 0:
            raise InvalidInput("limit", "must not be negative")
        needle = (query or "").strip().casefold()
        matches = [
            record
            for record in self.ledger.medications()
            if not needle or needle in record.name.casefold()
        ]
        return [
            MedicationSuggestion(name=record.name, usage_count=record.usage_count)
            for record in self._rank(matches)[:resolved_limit]
        ]

    @staticmethod
    def _rank(records: list[MedicationRecord]) -> list[MedicationRecord]:
        """Rank by usage count, then most recent use; ties keep input order."""
        return sorted(
            records,
            key=lambda record: (record.usage_count, record.last_used_at),
            reverse=True,
        )
