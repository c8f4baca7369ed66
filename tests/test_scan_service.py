"""Tests for the barcode and meal scan flows."""

import asyncio
from uuid import UUID, uuid4

import pytest

from nutriscan.domain.annotations import SpanKind
from nutriscan.domain.errors import (
    InvalidServingInputError,
    ProductNotFoundError,
    ProfileNotFoundError,
)
from nutriscan.services.scans import ScanService
from nutriscan.services.session import SessionService
from tests.conftest import (
    GRANOLA_BARCODE,
    FakeAnalysisClient,
    FakeProductClient,
    make_profile,
)


class BrokenAnalysisClient(FakeAnalysisClient):
    async def generate(self, **kwargs: object) -> dict[str, object]:
        raise RuntimeError("model unavailable")


def _onboard(session_service: SessionService, **overrides: object) -> UUID:
    user_id = uuid4()
    session_service.complete_onboarding(user_id, make_profile(**overrides))
    return user_id


def test_scan_product_highlights_ingredients(
    scan_service: ScanService, session_service: SessionService
) -> None:
    user_id = _onboard(session_service, allergies="peanuts", is_diabetic=True)

    scan = asyncio.run(scan_service.scan_product(user_id, GRANOLA_BARCODE))

    assert scan.serving_grams == 50
    assert scan.per_serving.macros["calories"] == 100
    assert scan.per_serving.micros["sodium"] == 250
    ingredients = scan.ingredients
    assert ingredients is not None
    assert ingredients.text == "Oats, Sugar (from Corn), Peanuts, Sugar, Salt"
    assert [ingredients.segment(s) for s in ingredients.spans_of(SpanKind.ALLERGEN)] == [
        "Peanuts"
    ]
    assert [
        ingredients.segment(s) for s in ingredients.spans_of(SpanKind.CONDITION)
    ] == ["Sugar"]
    assert scan.advice is not None
    assert scan.advice.warnings[0].type == "allergen"
    assert scan.advice_error is None


def test_scan_product_survives_advice_failure(
    session_service: SessionService, scan_service: ScanService
) -> None:
    scan_service.analysis_service.client = BrokenAnalysisClient()
    user_id = _onboard(session_service)

    scan = asyncio.run(scan_service.scan_product(user_id, GRANOLA_BARCODE))

    assert scan.advice is None
    assert scan.advice_error is not None
    assert scan.per_serving.macros["calories"] == 100


def test_product_without_ingredients_skips_advice(
    scan_service: ScanService,
    session_service: SessionService,
    product_client: FakeProductClient,
    analysis_client: FakeAnalysisClient,
) -> None:
    product_client.products["42"] = {
        "product_name": "Water",
        "nutriments": {"energy-kcal_100g": 0},
    }
    user_id = _onboard(session_service)

    scan = asyncio.run(scan_service.scan_product(user_id, "42"))

    assert scan.ingredients is None
    assert scan.advice is None
    assert scan.serving_grams == 100
    assert analysis_client.prompts == []


def test_log_product_scales_servings(
    scan_service: ScanService, session_service: SessionService
) -> None:
    user_id = _onboard(session_service)

    log = asyncio.run(scan_service.log_product(user_id, GRANOLA_BARCODE, servings=2))

    assert log.macros.calories == 200
    assert log.micros.sodium == 500
    assert log.micros.sugar == 30


def test_log_product_with_explicit_serving_size(
    scan_service: ScanService, session_service: SessionService
) -> None:
    user_id = _onboard(session_service)

    log = asyncio.run(
        scan_service.log_product(user_id, GRANOLA_BARCODE, servings=1, serving_grams=25)
    )

    assert log.macros.calories == 50


def test_log_product_rejects_negative_servings(
    scan_service: ScanService, session_service: SessionService
) -> None:
    user_id = _onboard(session_service)

    with pytest.raises(InvalidServingInputError):
        asyncio.run(scan_service.log_product(user_id, GRANOLA_BARCODE, servings=-1))

    assert session_service.get_log(user_id).macros.calories == 0


def test_unknown_product_is_reported(
    scan_service: ScanService, session_service: SessionService
) -> None:
    user_id = _onboard(session_service)

    with pytest.raises(ProductNotFoundError):
        asyncio.run(scan_service.scan_product(user_id, "0000000000000"))


def test_scan_requires_profile(scan_service: ScanService) -> None:
    with pytest.raises(ProfileNotFoundError):
        asyncio.run(scan_service.scan_product(uuid4(), GRANOLA_BARCODE))


def test_log_meal_adds_reported_fields(
    scan_service: ScanService, session_service: SessionService
) -> None:
    user_id = _onboard(session_service)

    scan, log = asyncio.run(scan_service.log_meal(user_id, b"\xff\xd8\xff"))

    assert scan.analysis.meal_name == "Rice and lentil curry"
    assert "cholesterol" not in scan.record.micros
    assert log.macros.calories == 650
    assert log.macros.carbohydrates == 95
    assert log.micros.sodium == 800
    assert log.micros.cholesterol == 0


def test_analyze_meal_does_not_log(
    scan_service: ScanService, session_service: SessionService
) -> None:
    user_id = _onboard(session_service)

    asyncio.run(scan_service.analyze_meal(user_id, b"\xff\xd8\xff"))

    assert session_service.get_log(user_id).macros.calories == 0
