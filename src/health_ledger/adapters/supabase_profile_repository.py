"""Supabase repository for the user profile."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from health_ledger.domain.thresholds import Band, UserProfile, UserThresholds
from health_ledger.services.ledger import ProfileRepository

PROFILE_ID = "default"

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for the single user profile row."""

    client: Client

    def load_profile(self) -> UserProfile | None:
        """Return the stored profile, if present."""
        response = (
            self.client.table("user_profile")
            .select("*")
            .eq("id", PROFILE_ID)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def save_profile(self, profile: UserProfile) -> bool:
        """Upsert the profile row."""
        thresholds = profile.thresholds
        try:
            response = self.client.table("user_profile").upsert(
                {
                    "id": PROFILE_ID,
                    "name": profile.name,
                    "glucose_min": thresholds.glucose.minimum,
                    "glucose_max": thresholds.glucose.maximum,
                    "systolic_min": thresholds.systolic.minimum,
                    "systolic_max": thresholds.systolic.maximum,
                    "diastolic_min": thresholds.diastolic.minimum,
                    "diastolic_max": thresholds.diastolic.maximum,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            ).execute()
        except Exception:
            _logger.exception("Failed to save user profile")
            return False
        if not response.data:
            _logger.error("Upsert to user_profile returned no rows")
            return False
        return True


def _parse_profile(row: dict[str, object]) -> UserProfile:
    """Parse a profile row into a domain model."""
    return UserProfile(
        name=str(row.get("name") or ""),
        thresholds=UserThresholds(
            glucose=Band(float(row["glucose_min"]), float(row["glucose_max"])),
            systolic=Band(float(row["systolic_min"]), float(row["systolic_max"])),
            diastolic=Band(float(row["diastolic_min"]), float(row["diastolic_max"])),
        ),
    )
