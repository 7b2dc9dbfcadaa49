"""Status banding rules for glucose and blood pressure."""

from enum import StrEnum

from health_ledger.domain.records import Status
from health_ledger.domain.thresholds import Band, UserThresholds

LOWER_TOLERANCE = 0.9
UPPER_TOLERANCE = 1.2

ELEVATED_SYSTOLIC = 120
STAGE1_SYSTOLIC = 130
STAGE2_SYSTOLIC = 140
STAGE1_DIASTOLIC = 80
STAGE2_DIASTOLIC = 90
BORDERLINE_WIDTH = 10


class PressureCategory(StrEnum):
    """Clinical blood pressure category, independent of personal thresholds."""

    NORMAL = "normal"
    PREHYPERTENSION = "prehypertension"
    STAGE1_HYPERTENSION = "stage1_hypertension"
    STAGE2_HYPERTENSION = "stage2_hypertension"


def classify(value: float, band: Band) -> Status:
    """Classify a value against a band.

    Values inside the band are normal. Up to 10% below the minimum or 20%
    above the maximum is a warning; anything further out is critical.
    """
    if band.minimum <= value <= band.maximum:
        return Status.NORMAL
    if band.minimum * LOWER_TOLERANCE <= value < band.minimum:
        return Status.WARNING
    if band.maximum < value <= band.maximum * UPPER_TOLERANCE:
        return Status.WARNING
    return Status.CRITICAL


def classify_pressure(
    systolic: float, diastolic: float, thresholds: UserThresholds
) -> Status:
    """Classify both pressure components and keep the worse band."""
    statuses = {
        classify(systolic, thresholds.systolic),
        classify(diastolic, thresholds.diastolic),
    }
    if Status.CRITICAL in statuses:
        return Status.CRITICAL
    if Status.WARNING in statuses:
        return Status.WARNING
    return Status.NORMAL


def pressure_category(systolic: float, diastolic: float) -> PressureCategory:
    """Return the clinical category for a reading.

    Readings that fall in the first band past stage 1 (140-149 systolic or
    90-99 diastolic) are still reported as stage 1.
    """
    elevated_systolic = ELEVATED_SYSTOLIC <= systolic < STAGE1_SYSTOLIC
    if systolic < ELEVATED_SYSTOLIC and diastolic < STAGE1_DIASTOLIC:
        return PressureCategory.NORMAL
    if elevated_systolic and diastolic < STAGE1_DIASTOLIC:
        return PressureCategory.PREHYPERTENSION
    if (
        STAGE1_SYSTOLIC <= systolic < STAGE2_SYSTOLIC
        or STAGE1_DIASTOLIC <= diastolic < STAGE2_DIASTOLIC
    ):
        if elevated_systolic:
            return PressureCategory.PREHYPERTENSION
        return PressureCategory.STAGE1_HYPERTENSION
    if (
        STAGE2_SYSTOLIC <= systolic < STAGE2_SYSTOLIC + BORDERLINE_WIDTH
        or STAGE2_DIASTOLIC <= diastolic < STAGE2_DIASTOLIC + BORDERLINE_WIDTH
    ):
        return PressureCategory.STAGE1_HYPERTENSION
    return PressureCategory.STAGE2_HYPERTENSION
