"""Personalized AI analysis of meal photos and product ingredients."""

import base64
import logging
from dataclasses import dataclass
from typing import Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from nutriscan.domain.analysis import MealAnalysis, ProductAnalysis
from nutriscan.domain.errors import AnalysisError
from nutriscan.domain.products import Product
from nutriscan.domain.profile import HealthProfile

_logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)

_NUMBER_OR_NULL: dict[str, object] = {"anyOf": [{"type": "number"}, {"type": "null"}]}
_WARNING_TYPE: dict[str, object] = {"type": "string", "enum": ["allergen", "health_condition"]}

MEAL_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "meal_name": {"type": "string"},
        "estimated_calories": {"type": "number"},
        "macros": {
            "type": "object",
            "properties": {
                "protein": {"type": "number"},
                "carbohydrates": {"type": "number"},
                "fat": {"type": "number"},
            },
            "required": ["protein", "carbohydrates", "fat"],
            "additionalProperties": False,
        },
        "micronutrients": {
            "type": "object",
            "properties": {
                "saturated_fat": _NUMBER_OR_NULL,
                "cholesterol": _NUMBER_OR_NULL,
                "sodium": _NUMBER_OR_NULL,
                "potassium": _NUMBER_OR_NULL,
                "fiber": _NUMBER_OR_NULL,
                "sugar": _NUMBER_OR_NULL,
            },
            "required": [
                "saturated_fat",
                "cholesterol",
                "sodium",
                "potassium",
                "fiber",
                "sugar",
            ],
            "additionalProperties": False,
        },
        "ingredients": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "estimated_weight_grams": {"type": "number", "minimum": 0},
                },
                "required": ["name", "estimated_weight_grams"],
                "additionalProperties": False,
            },
        },
        "health_analysis": {"type": "string"},
        "portion_advice": {"type": "string"},
        "is_recommended": {"type": "boolean"},
        "personalized_warnings": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "type": _WARNING_TYPE,
                    "trigger": {"type": "string"},
                    "message": {"type": "string"},
                },
                "required": ["type", "trigger", "message"],
                "additionalProperties": False,
            },
        },
        "alternative_suggestions": {"type": "array", "items": {"type": "string"}},
    },
    "required": [
        "meal_name",
        "estimated_calories",
        "macros",
        "micronutrients",
        "ingredients",
        "health_analysis",
        "portion_advice",
        "is_recommended",
        "personalized_warnings",
        "alternative_suggestions",
    ],
    "additionalProperties": False,
}

PRODUCT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "warnings": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "type": _WARNING_TYPE,
                    "trigger_ingredient": {"type": "string"},
                    "message": {"type": "string"},
                },
                "required": ["type", "trigger_ingredient", "message"],
                "additionalProperties": False,
            },
        },
        "alternative_suggestions": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["warnings", "alternative_suggestions"],
    "additionalProperties": False,
}


class AnalysisClient(Protocol):
    """Interface for structured LLM generation."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema_name: str,
        schema: dict[str, object],
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        """Return structured output matching ``schema``."""


@dataclass
class AnalysisService:
    """Builds personalized prompts and validates the AI's answers."""

    client: AnalysisClient
    meal_model: str
    product_model: str
    reasoning_effort: str | None
    store: bool

    async def analyze_meal(self, image_bytes: bytes, profile: HealthProfile) -> MealAnalysis:
        """Estimate nutrients of a meal photo and advise the user."""
        raw = await self._generate(
            model=self.meal_model,
            prompt=meal_prompt(profile),
            schema_name="meal_analysis",
            schema=MEAL_SCHEMA,
            image_data_url=_to_data_url(image_bytes),
        )
        return _validate(MealAnalysis, raw)

    async def analyze_product(
        self, product: Product, profile: HealthProfile
    ) -> ProductAnalysis:
        """Warn about a product's ingredients for this user."""
        raw = await self._generate(
            model=self.product_model,
            prompt=product_prompt(product, profile),
            schema_name="product_analysis",
            schema=PRODUCT_SCHEMA,
            image_data_url=None,
        )
        return _validate(ProductAnalysis, raw)

    async def _generate(
        self,
        *,
        model: str,
        prompt: str,
        schema_name: str,
        schema: dict[str, object],
        image_data_url: str | None,
    ) -> dict[str, object]:
        try:
            return await self.client.generate(
                model=model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=prompt,
                schema_name=schema_name,
                schema=schema,
                image_data_url=image_data_url,
            )
        except AnalysisError:
            raise
        except Exception as exc:
            _logger.warning("AI %s request failed: %s", schema_name, exc)
            raise AnalysisError(f"Failed to get {schema_name} from AI") from exc


def meal_prompt(profile: HealthProfile) -> str:
    """Build the meal photo prompt for a user."""
    lines = [
        "As an expert nutritionist, analyze the following meal image for a user "
        "with these characteristics:",
        f"- Gender: {profile.gender.value}",
        f"- Age: {profile.age}",
        f"- Fitness Goal: {_humanize(profile.fitness_goal.value)}",
        f"- Activity Level: {_humanize(profile.activity_level.value)}",
        f"- Diet Preference: {profile.diet_preference.value}",
    ]
    conditions = profile.condition_labels()
    if conditions:
        lines.append(f"- Health Conditions: {', '.join(conditions)}")
    if profile.allergies.strip():
        lines.append(f"- Allergies: {profile.allergies.strip()}")
    lines.extend(
        [
            "",
            "If a common object (coin, card, hand) is visible, use it for scale "
            "when estimating portions.",
            "1. Identify the main components and estimate each weight in grams.",
            "2. Estimate total calories and protein, carbohydrates and fat in grams.",
            "3. Estimate saturated fat (g), cholesterol (mg), sodium (mg), "
            "potassium (mg), fiber (g) and sugar (g) for the whole meal.",
            "4. Give a health analysis, portion advice, personalized warnings and "
            "healthier alternatives.",
            "Only create an 'allergen' warning for an ingredient that matches one of "
            "the user's listed allergies. Only create a 'health_condition' warning "
            "when the meal conflicts with the user's listed conditions. Do not warn "
            "about common allergens the user has not listed.",
            "5. Set is_recommended based on the user's profile.",
        ]
    )
    return "\n".join(lines)


def product_prompt(product: Product, profile: HealthProfile) -> str:
    """Build the product ingredient prompt for a user."""
    conditions = ", ".join(profile.condition_labels()) or "None"
    allergies = profile.allergies.strip() or "None listed"
    return "\n".join(
        [
            "You are an expert nutritionist providing personalized advice. "
            "A user with the following profile has scanned a product.",
            "",
            f"Health Conditions: {conditions}",
            f"Allergies: {allergies}",
            "",
            f"Product Name: {product.name or 'N/A'}",
            f"Ingredients: {product.ingredients_text or 'None listed'}",
            "",
            "Only create an 'allergen' warning when an ingredient explicitly matches "
            f"one of the user's allergies ({allergies}). Only create a "
            "'health_condition' warning when an ingredient or the nutrition profile "
            f"conflicts with the user's conditions ({conditions}). Explain why each "
            "warning matters for this user.",
            "Suggest specific, healthier alternative products. Return empty lists "
            "when nothing applies.",
        ]
    )


def _validate(model: type[_ModelT], raw: dict[str, object]) -> _ModelT:
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        _logger.warning("AI returned invalid %s: %s", model.__name__, exc)
        raise AnalysisError(f"AI returned an invalid {model.__name__}") from exc


def _humanize(value: str) -> str:
    return value.replace("_", " ")


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
