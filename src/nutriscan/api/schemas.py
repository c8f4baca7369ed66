"""Pydantic request and response models for the HTTP API."""

from dataclasses import asdict

from pydantic import BaseModel, Field

from nutriscan.domain.annotations import AnnotatedText
from nutriscan.domain.nutrients import DailyLog, LoggedNutrients, NutritionGoals
from nutriscan.domain.profile import (
    ActivityLevel,
    DietPreference,
    FitnessGoal,
    Gender,
    HealthProfile,
)
from nutriscan.services.aggregation import NutrientProgress


class ProfilePayload(BaseModel):
    """Onboarding answers."""

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

    def to_domain(self) -> HealthProfile:
        """Build the domain profile; targets are derived by the session service."""
        return HealthProfile(**self.model_dump())


class NutrientMap(BaseModel):
    """Nested macro/micro amounts."""

    macros: dict[str, float] = Field(default_factory=dict)
    micros: dict[str, float] = Field(default_factory=dict)

    @classmethod
    def from_log(cls, log: DailyLog | NutritionGoals) -> "NutrientMap":
        """Serialize a full log or target profile."""
        return cls(**log.to_dict())

    @classmethod
    def from_record(cls, record: LoggedNutrients) -> "NutrientMap":
        """Serialize a partial record."""
        return cls(macros=dict(record.macros), micros=dict(record.micros))

    def to_record(self) -> LoggedNutrients:
        """Build a record; raises ValueError on unknown nutrient names."""
        return LoggedNutrients(macros=self.macros, micros=self.micros)


class ProfileResponse(ProfilePayload):
    """Stored profile with its cached targets."""

    nutrition_goals: NutrientMap | None = None

    @classmethod
    def from_domain(cls, profile: HealthProfile) -> "ProfileResponse":
        """Serialize a domain profile."""
        data = asdict(profile)
        goals = profile.nutrition_goals
        data["nutrition_goals"] = NutrientMap.from_log(goals) if goals else None
        return cls(**data)


class ProgressRow(BaseModel):
    """Consumption against one target."""

    nutrient: str
    unit: str
    consumed: float
    goal: float
    remaining: float
    percent: float | None

    @classmethod
    def from_domain(cls, row: NutrientProgress) -> "ProgressRow":
        """Serialize a progress row."""
        return cls(
            nutrient=row.nutrient,
            unit=row.unit,
            consumed=row.consumed,
            goal=row.goal,
            remaining=row.remaining,
            percent=row.percent,
        )


class ServingsPayload(BaseModel):
    """How much of a scanned product was eaten."""

    servings: float = 1.0
    serving_grams: float | None = None


class MealPayload(BaseModel):
    """Meal photo, base64 encoded."""

    image_base64: str
    log: bool = False


class AnnotatePayload(BaseModel):
    """Ingredient text to annotate for a set of allergies and conditions."""

    text: str
    allergies: str = ""
    is_diabetic: bool = False
    has_high_bp: bool = False


class SpanModel(BaseModel):
    """Highlighted span in the display text."""

    start: int
    end: int
    kind: str
    matched_term: str


class SubstitutionModel(BaseModel):
    """Technical term rewritten into a lay term."""

    start: int
    end: int
    original: str
    replacement: str


class AnnotatedTextResponse(BaseModel):
    """Annotated ingredient text."""

    original: str
    text: str
    substitutions: list[SubstitutionModel]
    spans: list[SpanModel]

    @classmethod
    def from_domain(cls, annotated: AnnotatedText) -> "AnnotatedTextResponse":
        """Serialize annotated text."""
        return cls(
            original=annotated.original,
            text=annotated.text,
            substitutions=[
                SubstitutionModel(**asdict(sub)) for sub in annotated.substitutions
            ],
            spans=[
                SpanModel(
                    start=span.start,
                    end=span.end,
                    kind=span.kind.value,
                    matched_term=span.matched_term,
                )
                for span in annotated.spans
            ],
        )
