"""Health profile domain models."""

from dataclasses import dataclass
from enum import Enum

from nutriscan.domain.nutrients import NutritionGoals


class Gender(str, Enum):
    """Gender options offered at onboarding."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityLevel(str, Enum):
    """Self-reported activity level."""

    SEDENTARY = "sedentary"
    LIGHTLY_ACTIVE = "lightly_active"
    MODERATELY_ACTIVE = "moderately_active"
    VERY_ACTIVE = "very_active"


class DietPreference(str, Enum):
    """Dietary preference used to personalize AI advice."""

    NONE = "none"
    VEGETARIAN = "vegetarian"
    NON_VEGETARIAN = "non-vegetarian"
    VEGAN = "vegan"


class FitnessGoal(str, Enum):
    """Fitness goal driving the calorie offset."""

    LOSE_WEIGHT = "lose_weight"
    MAINTAIN_WEIGHT = "maintain_weight"
    GAIN_MUSCLE = "gain_muscle"


@dataclass(frozen=True)
class HealthProfile:
    """User health profile captured during onboarding.

    ``nutrition_goals`` caches the derived targets so they are not recomputed
    on every launch.
    """

    gender: Gender
    age: int
    height_cm: float
    weight_kg: float
    activity_level: ActivityLevel
    diet_preference: DietPreference = DietPreference.NONE
    fitness_goal: FitnessGoal = FitnessGoal.MAINTAIN_WEIGHT
    is_diabetic: bool = False
    has_high_bp: bool = False
    has_high_cholesterol: bool = False
    has_pcos: bool = False
    has_thyroid_issues: bool = False
    is_pregnant: bool = False
    is_breastfeeding: bool = False
    allergies: str = ""
    nutrition_goals: NutritionGoals | None = None

    def condition_labels(self) -> list[str]:
        """Return human-readable labels for the active health conditions."""
        labels = [
            ("Diabetes", self.is_diabetic),
            ("High Blood Pressure", self.has_high_bp),
            ("High Cholesterol", self.has_high_cholesterol),
            ("PCOS", self.has_pcos),
            ("Thyroid Issues", self.has_thyroid_issues),
            ("Pregnancy", self.is_pregnant),
            ("Breastfeeding", self.is_breastfeeding),
        ]
        return [label for label, active in labels if active]
