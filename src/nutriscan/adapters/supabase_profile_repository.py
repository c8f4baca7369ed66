"""Supabase repository for health profiles."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from nutriscan.domain.nutrients import NutritionGoals
from nutriscan.domain.profile import (
    ActivityLevel,
    DietPreference,
    FitnessGoal,
    Gender,
    HealthProfile,
)
from nutriscan.services.session import ProfileRepository

_FLAG_COLUMNS = (
    "is_diabetic",
    "has_high_bp",
    "has_high_cholesterol",
    "has_pcos",
    "has_thyroid_issues",
    "is_pregnant",
    "is_breastfeeding",
)


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profile persistence."""

    client: Client

    def get_profile(self, user_id: UUID) -> HealthProfile | None:
        """Return the stored profile for a user, if present."""
        response = (
            self.client.table("health_profiles")
            .select("*")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return profile_from_row(response.data[0])

    def save_profile(self, user_id: UUID, profile: HealthProfile) -> None:
        """Insert or replace the profile row for a user."""
        row = profile_to_row(profile)
        row["user_id"] = str(user_id)
        row["updated_at"] = datetime.now(tz=UTC).isoformat()
        self.client.table("health_profiles").upsert(row, on_conflict="user_id").execute()

    def delete_profile(self, user_id: UUID) -> None:
        """Delete the profile row for a user."""
        self.client.table("health_profiles").delete().eq(
            "user_id", str(user_id)
        ).execute()


def profile_to_row(profile: HealthProfile) -> dict[str, object]:
    """Serialize a profile into a table row."""
    row: dict[str, object] = {
        "gender": profile.gender.value,
        "age": profile.age,
        "height_cm": profile.height_cm,
        "weight_kg": profile.weight_kg,
        "activity_level": profile.activity_level.value,
        "diet_preference": profile.diet_preference.value,
        "fitness_goal": profile.fitness_goal.value,
        "allergies": profile.allergies,
        "nutrition_goals": (
            profile.nutrition_goals.to_dict() if profile.nutrition_goals else None
        ),
    }
    for column in _FLAG_COLUMNS:
        row[column] = getattr(profile, column)
    return row


def profile_from_row(row: dict[str, object]) -> HealthProfile:
    """Build a profile from a table row."""
    goals = row.get("nutrition_goals")
    return HealthProfile(
        gender=Gender(row["gender"]),
        age=int(row["age"]),
        height_cm=float(row["height_cm"]),
        weight_kg=float(row["weight_kg"]),
        activity_level=ActivityLevel(row["activity_level"]),
        diet_preference=DietPreference(row.get("diet_preference") or "none"),
        fitness_goal=FitnessGoal(row.get("fitness_goal") or "maintain_weight"),
        allergies=str(row.get("allergies") or ""),
        nutrition_goals=NutritionGoals.from_dict(goals) if isinstance(goals, dict) else None,
        **{column: bool(row.get(column)) for column in _FLAG_COLUMNS},
    )
