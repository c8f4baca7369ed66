"""Models for AI analysis results."""

from typing import Literal

from pydantic import BaseModel, Field

WarningType = Literal["allergen", "health_condition"]


class MealMacros(BaseModel):
    """Estimated macronutrients for a whole meal, in grams."""

    protein: float | None = Field(default=None, ge=0)
    carbohydrates: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)


class MealMicros(BaseModel):
    """Estimated micronutrients for a whole meal.

    Sodium, potassium and cholesterol are milligrams; the rest grams.
    """

    saturated_fat: float | None = Field(default=None, ge=0)
    cholesterol: float | None = Field(default=None, ge=0)
    sodium: float | None = Field(default=None, ge=0)
    potassium: float | None = Field(default=None, ge=0)
    fiber: float | None = Field(default=None, ge=0)
    sugar: float | None = Field(default=None, ge=0)


class MealIngredient(BaseModel):
    """Identified meal component with an estimated weight."""

    name: str
    estimated_weight_grams: float = Field(ge=0)


class MealWarning(BaseModel):
    """Personalized warning about a meal."""

    type: WarningType
    trigger: str
    message: str


class MealAnalysis(BaseModel):
    """Structured output of the meal photo analysis."""

    meal_name: str = ""
    estimated_calories: float | None = Field(default=None, ge=0)
    macros: MealMacros = Field(default_factory=MealMacros)
    micronutrients: MealMicros = Field(default_factory=MealMicros)
    ingredients: list[MealIngredient] = Field(default_factory=list)
    health_analysis: str = ""
    portion_advice: str = ""
    is_recommended: bool | None = None
    personalized_warnings: list[MealWarning] = Field(default_factory=list)
    alternative_suggestions: list[str] = Field(default_factory=list)


class ProductWarning(BaseModel):
    """Personalized warning about a packaged product."""

    type: WarningType
    trigger_ingredient: str
    message: str


class ProductAnalysis(BaseModel):
    """Structured output of the product ingredient analysis."""

    warnings: list[ProductWarning] = Field(default_factory=list)
    alternative_suggestions: list[str] = Field(default_factory=list)
