"""Personal threshold bands and the user profile that owns them."""

from dataclasses import dataclass

from health_ledger.domain.errors import InvalidInput

AGE_ADJUSTMENT_YEARS = 50
BMI_ADJUSTMENT = 25


@dataclass(frozen=True)
class Band:
    """Inclusive normal range for a single metric."""

    minimum: float
    maximum: float


@dataclass(frozen=True)
class UserThresholds:
    """Threshold bands used to classify every measurement."""

    glucose: Band
    systolic: Band
    diastolic: Band


@dataclass(frozen=True)
class UserProfile:
    """The single user of the ledger."""

    name: str
    thresholds: UserThresholds


DEFAULT_THRESHOLDS = UserThresholds(
    glucose=Band(70, 180),
    systolic=Band(90, 140),
    diastolic=Band(60, 90),
)

DEFAULT_PROFILE = UserProfile(name="", thresholds=DEFAULT_THRESHOLDS)


def default_thresholds(age: int, weight_kg: float, height_cm: float) -> UserThresholds:
    """Suggest fasting glucose and pressure bands from age and BMI."""
    if age < 0:
        raise InvalidInput("age", "must not be negative")
    if weight_kg <= 0:
        raise InvalidInput("weight_kg", "must be positive")
    if height_cm <= 0:
        raise InvalidInput("height_cm", "must be positive")
    bmi = weight_kg / (height_cm / 100) ** 2

    glucose_min, glucose_max = 70.0, 100.0
    systolic_min, systolic_max = 110.0, 120.0
    diastolic_min, diastolic_max = 70.0, 80.0

    if age > AGE_ADJUSTMENT_YEARS:
        glucose_max += 10
        systolic_max += 15
        diastolic_max += 10
    if bmi > BMI_ADJUSTMENT:
        glucose_min += 5
        glucose_max += 15
        systolic_min += 5
        systolic_max += 10
        diastolic_min += 5
        diastolic_max += 5

    return UserThresholds(
        glucose=Band(glucose_min, glucose_max),
        systolic=Band(systolic_min, systolic_max),
        diastolic=Band(diastolic_min, diastolic_max),
    )
