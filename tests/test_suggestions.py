"""Tests for medication suggestions."""

from datetime import UTC, datetime
from uuid import uuid4

import pytest

from health_ledger.domain.errors import InvalidInput
from health_ledger.domain.records import FoodRelation, MedicationRecord
from health_ledger.services.ledger import MeasurementLedger
from health_ledger.services.suggestions import (
    MedicationSuggestion,
    MedicationSuggestionRanker,
)


def test_frequency_beats_alphabetical_order(ledger: MeasurementLedger) -> None:
    ledger.add_medication_intake("Aspirina", "after", instant="2025-08-22T09:00")
    ledger.add_medication_intake("Metformina", "before", instant="2025-08-21T08:00")
    ledger.add_medication_intake("Metformina", "before", instant="2025-08-21T20:00")
    ranker = MedicationSuggestionRanker(ledger)

    assert ranker.suggest("", 5) == [
        MedicationSuggestion(name="Metformina", usage_count=2),
        MedicationSuggestion(name="Aspirina", usage_count=1),
    ]


def test_recency_breaks_usage_ties(ledger: MeasurementLedger) -> None:
    ledger.add_medication_intake("Losartan", "none", instant="2025-08-20T09:00")
    ledger.add_medication_intake("Enalapril", "none", instant="2025-08-21T09:00")
    ranker = MedicationSuggestionRanker(ledger)

    assert [item.name for item in ranker.suggest()] == ["Enalapril", "Losartan"]


def test_full_ties_keep_insertion_order(ledger: MeasurementLedger) -> None:
    for name in ["Zinc", "Hierro", "Calcio"]:
        ledger.add_medication_intake(name, "during", instant="2025-08-21T09:00")
    ranker = MedicationSuggestionRanker(ledger)

    assert [item.name for item in ranker.suggest()] == ["Zinc", "Hierro", "Calcio"]


def test_query_matches_substrings_case_insensitively(
    ledger: MeasurementLedger,
) -> None:
    ledger.add_medication_intake("Metformina", "before")
    ledger.add_medication_intake("Atorvastatina", "after")
    ledger.add_medication_intake("Insulina glargina", "none")
    ranker = MedicationSuggestionRanker(ledger)

    names = [item.name for item in ranker.suggest("  TINA ")]

    assert sorted(names) == ["Atorvastatina"]
    assert [item.name for item in ranker.suggest("ina")] != []
    assert ranker.suggest("paracetamol") == []


def test_limit_truncates_results(ledger: MeasurementLedger) -> None:
    for index in range(8):
        ledger.add_medication_intake(f"Med {index}", "none")
    ranker = MedicationSuggestionRanker(ledger, default_limit=5)

    assert len(ranker.suggest()) == 5
    assert len(ranker.suggest("med", limit=3)) == 3
    assert ranker.suggest(limit=0) == []
    with pytest.raises(InvalidInput):
        ranker.suggest(limit=-1)


def test_rank_orders_by_usage_then_recency() -> None:
    now = datetime(2025, 8, 22, tzinfo=UTC)
    older = now.replace(year=2024)
    records = [
        MedicationRecord(uuid4(), "A", FoodRelation.NONE, 1, now),
        MedicationRecord(uuid4(), "B", FoodRelation.NONE, 5, older),
        MedicationRecord(uuid4(), "C", FoodRelation.NONE, 5, now),
    ]

    ranked = MedicationSuggestionRanker._rank(records)

    assert [record.name for record in ranked] == ["C", "B", "A"]
