"""Daily nutrient target derivation from a health profile."""

import logging
import math
from dataclasses import dataclass, replace

from nutriscan.domain.errors import InvalidProfileError
from nutriscan.domain.nutrients import MacroGoals, MicroGoals, NutritionGoals
from nutriscan.domain.profile import ActivityLevel, FitnessGoal, Gender, HealthProfile

_logger = logging.getLogger(__name__)

KCAL_PER_GRAM_CARBOHYDRATE = 4
KCAL_PER_GRAM_PROTEIN = 4
KCAL_PER_GRAM_FAT = 9

_GENDER_OFFSETS: dict[Gender, float] = {
    Gender.MALE: 5,
    Gender.FEMALE: -161,
    Gender.OTHER: -78,
}

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
}

FITNESS_OFFSETS: dict[FitnessGoal, float] = {
    FitnessGoal.LOSE_WEIGHT: -500,
    FitnessGoal.MAINTAIN_WEIGHT: 0,
    FitnessGoal.GAIN_MUSCLE: 400,
}

PREGNANCY_EXTRA_KCAL = 300
BREASTFEEDING_EXTRA_KCAL = 450


@dataclass(frozen=True)
class MacroSplit:
    """Fractions of daily calories from each macronutrient."""

    carbohydrates: float
    protein: float
    fat: float


BASELINE_SPLIT = MacroSplit(carbohydrates=0.45, protein=0.25, fat=0.30)
HIGHER_PROTEIN_SPLIT = MacroSplit(carbohydrates=0.45, protein=0.30, fat=0.25)
BREASTFEEDING_SPLIT = MacroSplit(carbohydrates=0.50, protein=0.25, fat=0.25)


def validate_profile(profile: HealthProfile) -> None:
    """Raise InvalidProfileError when the profile breaks onboarding invariants."""
    problems: list[str] = []
    for name in ("age", "height_cm", "weight_kg"):
        value = getattr(profile, name)
        if isinstance(value, bool) or not isinstance(value, int | float):
            problems.append(f"{name} must be a number")
        elif not math.isfinite(value) or value <= 0:
            problems.append(f"{name} must be positive")
    if isinstance(profile.age, float) and not profile.age.is_integer():
        problems.append("age must be a whole number of years")
    if profile.gender is not Gender.FEMALE and (
        profile.is_pregnant or profile.is_breastfeeding
    ):
        problems.append("pregnancy and breastfeeding apply only to female profiles")
    if problems:
        raise InvalidProfileError("; ".join(problems))


def calculate_bmr(profile: HealthProfile) -> float:
    """Return basal metabolic rate (Mifflin-St Jeor) in kcal/day."""
    base = 10 * profile.weight_kg + 6.25 * profile.height_cm - 5 * profile.age
    return base + _GENDER_OFFSETS[profile.gender]


def calculate_tdee(profile: HealthProfile) -> float:
    """Return total daily energy expenditure before any adjustment."""
    return calculate_bmr(profile) * ACTIVITY_MULTIPLIERS[profile.activity_level]


def baseline_micros(gender: Gender) -> MicroGoals:
    """Return guideline micronutrient targets before condition adjustments."""
    is_male = gender is Gender.MALE
    return MicroGoals(
        saturated_fat=20,
        polyunsaturated_fat=22,
        monounsaturated_fat=50,
        trans_fat=0,
        cholesterol=300,
        sodium=2300,
        potassium=4700,
        fiber=28,
        sugar=50,
        vitamin_a=900 if is_male else 700,
        vitamin_c=90 if is_male else 75,
        calcium=1000,
        iron=8 if is_male else 18,
    )


def compute_targets(profile: HealthProfile) -> NutritionGoals:
    """Derive daily calorie, macro and micro targets for a profile.

    Condition rules run in a fixed order and each touches only its own
    fields. Pregnancy and breastfeeding both apply when both are set, so
    their calorie additions stack and the breastfeeding split wins.
    """
    validate_profile(profile)
    energy = calculate_tdee(profile)
    split = BASELINE_SPLIT
    micros = baseline_micros(profile.gender)

    if profile.is_diabetic or profile.has_pcos:
        split = HIGHER_PROTEIN_SPLIT
        micros = replace(micros, sugar=30)
    if profile.has_high_bp:
        micros = replace(micros, sodium=1500, potassium=4700)
    if profile.has_high_cholesterol:
        micros = replace(micros, saturated_fat=15)
    if profile.is_pregnant:
        energy += PREGNANCY_EXTRA_KCAL
        split = HIGHER_PROTEIN_SPLIT
        micros = replace(micros, iron=27, calcium=1300)
    if profile.is_breastfeeding:
        energy += BREASTFEEDING_EXTRA_KCAL
        split = BREASTFEEDING_SPLIT
        micros = replace(micros, iron=10, calcium=1300)

    calorie_goal = energy + FITNESS_OFFSETS[profile.fitness_goal]
    if calorie_goal <= 0:
        raise InvalidProfileError(
            f"profile yields a non-positive calorie goal ({calorie_goal:.0f} kcal)"
        )
    macros = MacroGoals(
        calories=round_half_up(calorie_goal),
        carbohydrates=round_half_up(
            calorie_goal * split.carbohydrates / KCAL_PER_GRAM_CARBOHYDRATE
        ),
        protein=round_half_up(calorie_goal * split.protein / KCAL_PER_GRAM_PROTEIN),
        fat=round_half_up(calorie_goal * split.fat / KCAL_PER_GRAM_FAT),
    )
    _logger.debug(
        "Derived targets: calories=%s split=%s conditions=%s",
        macros.calories,
        split,
        profile.condition_labels(),
    )
    return NutritionGoals(macros=macros, micros=micros)


def ensure_goals(profile: HealthProfile) -> HealthProfile:
    """Return the profile with targets attached, computing them only if absent."""
    if profile.nutrition_goals is not None:
        return profile
    return replace(profile, nutrition_goals=compute_targets(profile))


def rederive_goals(profile: HealthProfile) -> HealthProfile:
    """Return the profile with freshly computed targets, replacing cached ones."""
    return replace(profile, nutrition_goals=compute_targets(profile))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return math.floor(value + 0.5)
