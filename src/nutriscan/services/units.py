"""Unit conversion between product data and nutrient targets."""

import math
from enum import Enum


class Unit(str, Enum):
    """Units used by nutrient amounts."""

    KILOCALORIE = "kcal"
    GRAM = "g"
    MILLIGRAM = "mg"
    MICROGRAM = "mcg"


_PER_GRAM: dict[Unit, float] = {
    Unit.GRAM: 1.0,
    Unit.MILLIGRAM: 1_000.0,
    Unit.MICROGRAM: 1_000_000.0,
}

TARGET_UNITS: dict[str, Unit] = {
    "calories": Unit.KILOCALORIE,
    "carbohydrates": Unit.GRAM,
    "protein": Unit.GRAM,
    "fat": Unit.GRAM,
    "saturated_fat": Unit.GRAM,
    "polyunsaturated_fat": Unit.GRAM,
    "monounsaturated_fat": Unit.GRAM,
    "trans_fat": Unit.GRAM,
    "cholesterol": Unit.MILLIGRAM,
    "sodium": Unit.MILLIGRAM,
    "potassium": Unit.MILLIGRAM,
    "fiber": Unit.GRAM,
    "sugar": Unit.GRAM,
    "vitamin_a": Unit.MICROGRAM,
    "vitamin_c": Unit.MILLIGRAM,
    "calcium": Unit.MILLIGRAM,
    "iron": Unit.MILLIGRAM,
}


def convert(value: float, from_unit: Unit, to_unit: Unit) -> float:
    """Convert an amount between units.

    Energy cannot be converted to or from a mass unit.
    """
    if from_unit is to_unit:
        return float(value)
    if Unit.KILOCALORIE in (from_unit, to_unit):
        raise ValueError(f"Cannot convert {from_unit.value} to {to_unit.value}")
    return float(value) * _PER_GRAM[to_unit] / _PER_GRAM[from_unit]


def scale_amount(value: float, factor: float) -> float:
    """Scale a stored amount to the consumed amount."""
    if not math.isfinite(factor) or factor < 0:
        raise ValueError(f"Scaling factor must be a non-negative number, got {factor}")
    return float(value) * factor


def to_target_unit(field: str, value: float, source_unit: Unit) -> float:
    """Convert an amount reported in ``source_unit`` into the target unit of ``field``."""
    try:
        target = TARGET_UNITS[field]
    except KeyError as exc:
        raise ValueError(f"Unknown nutrient field: {field}") from exc
    return convert(value, source_unit, target)
