"""Tests for serving scaling."""

import math

import pytest

from nutriscan.domain.errors import InvalidServingInputError
from nutriscan.services.servings import (
    normalize_facts,
    parse_serving_size,
    scale,
    serving_multiplier,
)


def test_scale_converts_gram_sodium_to_milligrams() -> None:
    record = scale({"energy-kcal": 200, "sodium": 0.5}, serving_grams=50, servings=2)

    assert record.macros["calories"] == 200
    assert record.micros["sodium"] == 500


def test_scale_accepts_product_database_suffixes() -> None:
    record = scale(
        {
            "energy-kcal_100g": 400,
            "proteins_100g": 10,
            "carbohydrates_100g": 60,
            "fat_100g": 12,
            "sugars_100g": 20,
            "cholesterol_100g": 0.02,
            "potassium_100g": 0.3,
        },
        serving_grams=30,
        servings=1,
    )

    assert record.macros["calories"] == pytest.approx(120)
    assert record.macros["protein"] == pytest.approx(3)
    assert record.macros["carbohydrates"] == pytest.approx(18)
    assert record.macros["fat"] == pytest.approx(3.6)
    assert record.micros["sugar"] == pytest.approx(6)
    assert record.micros["cholesterol"] == pytest.approx(6)
    assert record.micros["potassium"] == pytest.approx(90)


def test_scale_leaves_unreported_fields_absent() -> None:
    record = scale({"proteins_100g": 5}, serving_grams=100, servings=1)

    assert dict(record.macros) == {"protein": 5}
    assert dict(record.micros) == {}


def test_zero_servings_scales_to_zero() -> None:
    record = scale({"energy-kcal": 250}, serving_grams=40, servings=0)

    assert record.macros["calories"] == 0


@pytest.mark.parametrize(
    ("serving_grams", "servings"),
    [
        (0, 1),
        (-30, 1),
        (math.nan, 1),
        (math.inf, 1),
        (30, -1),
        (30, math.nan),
        ("30", 1),
    ],
)
def test_invalid_serving_input_is_rejected(
    serving_grams: object, servings: object
) -> None:
    with pytest.raises(InvalidServingInputError):
        serving_multiplier(serving_grams, servings)  # type: ignore[arg-type]


def test_normalize_facts_derives_energy_and_sodium() -> None:
    facts = normalize_facts({"energy_100g": 836.8, "salt_100g": 1.25, "nova-group": 4})

    assert facts["energy-kcal"] == pytest.approx(200)
    assert facts["sodium"] == pytest.approx(0.5)
    assert "salt" not in facts
    assert "nova-group" not in facts


def test_negative_facts_are_dropped() -> None:
    facts = normalize_facts(
        {
            "energy-kcal_100g": -200,
            "proteins_100g": -1,
            "fat_100g": 4,
            "sugars_100g": math.nan,
        }
    )

    assert facts == {"fat": 4}


def test_scale_never_produces_negative_amounts() -> None:
    record = scale(
        {"energy-kcal_100g": -200, "sodium_100g": 0.2}, serving_grams=50, servings=1
    )

    assert "calories" not in record.macros
    assert record.micros["sodium"] == pytest.approx(100)


def test_reported_sodium_wins_over_salt() -> None:
    facts = normalize_facts({"salt_100g": 2.5, "sodium_100g": 0.4})

    assert facts["sodium"] == 0.4


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("30 g", 30),
        ("30g (2 biscuits)", 30),
        ("1 bar (45 g)", 45),
        ("250 ml", 250),
        ("33 cl", 330),
        ("1,5 kg", 1500),
        ("1 cup", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_serving_size(text: str | None, expected: float | None) -> None:
    assert parse_serving_size(text) == (
        pytest.approx(expected) if expected is not None else None
    )
