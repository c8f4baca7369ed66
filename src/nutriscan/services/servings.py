"""Scaling per-100g product facts to the amount actually eaten."""

import math
import re
from collections.abc import Mapping

from nutriscan.domain.errors import InvalidServingInputError
from nutriscan.domain.nutrients import MACRO_FIELDS, LoggedNutrients
from nutriscan.services.units import Unit, scale_amount, to_target_unit

KJ_PER_KCAL = 4.184
SALT_TO_SODIUM_RATIO = 2.5

# Product database key -> (nutrient field, unit the database reports it in).
PRODUCT_FIELDS: dict[str, tuple[str, Unit]] = {
    "energy-kcal": ("calories", Unit.KILOCALORIE),
    "carbohydrates": ("carbohydrates", Unit.GRAM),
    "proteins": ("protein", Unit.GRAM),
    "fat": ("fat", Unit.GRAM),
    "saturated-fat": ("saturated_fat", Unit.GRAM),
    "polyunsaturated-fat": ("polyunsaturated_fat", Unit.GRAM),
    "monounsaturated-fat": ("monounsaturated_fat", Unit.GRAM),
    "trans-fat": ("trans_fat", Unit.GRAM),
    "cholesterol": ("cholesterol", Unit.GRAM),
    "sodium": ("sodium", Unit.GRAM),
    "potassium": ("potassium", Unit.GRAM),
    "fiber": ("fiber", Unit.GRAM),
    "sugars": ("sugar", Unit.GRAM),
    "vitamin-a": ("vitamin_a", Unit.GRAM),
    "vitamin-c": ("vitamin_c", Unit.GRAM),
    "calcium": ("calcium", Unit.GRAM),
    "iron": ("iron", Unit.GRAM),
}

_SERVING_PATTERN = re.compile(
    r"(\d+(?:[.,]\d+)?)\s*(kg|mg|g|gr|grams?|ml|cl|l|oz)(?![a-z])",
    re.IGNORECASE,
)
_GRAMS_PER_UNIT: dict[str, float] = {
    "kg": 1000.0,
    "mg": 0.001,
    "g": 1.0,
    "gr": 1.0,
    "gram": 1.0,
    "grams": 1.0,
    "ml": 1.0,
    "cl": 10.0,
    "l": 1000.0,
    "oz": 28.3495,
}


def serving_multiplier(serving_grams: float, servings: float) -> float:
    """Return the factor applied to per-100g values."""
    if (
        isinstance(serving_grams, bool)
        or not isinstance(serving_grams, int | float)
        or not math.isfinite(serving_grams)
        or serving_grams <= 0
    ):
        raise InvalidServingInputError(
            f"Serving size must be a positive number of grams, got {serving_grams!r}"
        )
    if (
        isinstance(servings, bool)
        or not isinstance(servings, int | float)
        or not math.isfinite(servings)
        or servings < 0
    ):
        raise InvalidServingInputError(
            f"Servings must be zero or more, got {servings!r}"
        )
    return serving_grams * servings / 100


def scale(
    per_100g: Mapping[str, float], serving_grams: float, servings: float
) -> LoggedNutrients:
    """Scale per-100g product facts to a consumed record.

    Keys may carry the ``_100g`` suffix. Sodium, potassium and cholesterol
    arrive in grams and are converted to milligrams.
    """
    multiplier = serving_multiplier(serving_grams, servings)
    facts = normalize_facts(per_100g)
    macros: dict[str, float] = {}
    micros: dict[str, float] = {}
    for key, value in facts.items():
        name, source_unit = PRODUCT_FIELDS[key]
        amount = scale_amount(to_target_unit(name, value, source_unit), multiplier)
        if name in MACRO_FIELDS:
            macros[name] = amount
        else:
            micros[name] = amount
    return LoggedNutrients(macros=macros, micros=micros)


def normalize_facts(per_100g: Mapping[str, float]) -> dict[str, float]:
    """Return known per-100g facts keyed without the ``_100g`` suffix.

    Negative or non-finite values are dropped. Derives kcal from kJ and sodium
    from salt when only those are reported.
    """
    facts: dict[str, float] = {}
    for raw_key, value in per_100g.items():
        key = raw_key.removesuffix("_100g")
        if isinstance(value, bool) or not isinstance(value, int | float):
            continue
        if not math.isfinite(value) or value < 0:
            continue
        facts[key] = float(value)
    if "energy-kcal" not in facts and "energy" in facts:
        facts["energy-kcal"] = facts["energy"] / KJ_PER_KCAL
    if "sodium" not in facts and "salt" in facts:
        facts["sodium"] = facts["salt"] / SALT_TO_SODIUM_RATIO
    return {key: value for key, value in facts.items() if key in PRODUCT_FIELDS}


def parse_serving_size(text: str | None) -> float | None:
    """Read a serving size in grams from text such as ``"30 g (2 biscuits)"``.

    Volumes are taken at the density of water.
    """
    if not text:
        return None
    match = _SERVING_PATTERN.search(text)
    if match is None:
        return None
    quantity = float(match.group(1).replace(",", "."))
    grams = quantity * _GRAMS_PER_UNIT[match.group(2).lower()]
    return grams if grams > 0 else None
