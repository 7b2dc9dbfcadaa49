"""Tests for suggested threshold bands."""

import pytest

from health_ledger.domain.errors import InvalidInput
from health_ledger.domain.thresholds import (
    DEFAULT_PROFILE,
    DEFAULT_THRESHOLDS,
    Band,
    default_thresholds,
)


def test_young_adult_with_healthy_bmi_gets_base_bands() -> None:
    thresholds = default_thresholds(age=30, weight_kg=65, height_cm=175)

    assert thresholds.glucose == Band(70, 100)
    assert thresholds.systolic == Band(110, 120)
    assert thresholds.diastolic == Band(70, 80)


def test_age_widens_upper_limits() -> None:
    thresholds = default_thresholds(age=65, weight_kg=65, height_cm=175)

    assert thresholds.glucose == Band(70, 110)
    assert thresholds.systolic == Band(110, 135)
    assert thresholds.diastolic == Band(70, 90)


def test_high_bmi_shifts_both_limits() -> None:
    thresholds = default_thresholds(age=40, weight_kg=95, height_cm=170)

    assert thresholds.glucose == Band(75, 115)
    assert thresholds.systolic == Band(115, 130)
    assert thresholds.diastolic == Band(75, 85)


def test_age_and_bmi_adjustments_stack() -> None:
    thresholds = default_thresholds(age=70, weight_kg=100, height_cm=170)

    assert thresholds.glucose == Band(75, 125)
    assert thresholds.systolic == Band(115, 145)
    assert thresholds.diastolic == Band(75, 95)


def test_default_profile_uses_default_thresholds() -> None:
    assert DEFAULT_PROFILE.thresholds == DEFAULT_THRESHOLDS
    assert DEFAULT_THRESHOLDS.glucose == Band(70, 180)


@pytest.mark.parametrize(
    ("age", "weight_kg", "height_cm", "field"),
    [
        (30, 65, 0, "height_cm"),
        (30, 65, -170, "height_cm"),
        (30, 0, 175, "weight_kg"),
        (-1, 65, 175, "age"),
    ],
)
def test_invalid_body_measurements_are_rejected(
    age: int, weight_kg: float, height_cm: float, field: str
) -> None:
    with pytest.raises(InvalidInput) as excinfo:
        default_thresholds(age=age, weight_kg=weight_kg, height_cm=height_cm)

    assert excinfo.value.field == field
