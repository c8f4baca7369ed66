"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

import pytest

from nutriscan.config import Settings
from nutriscan.containers import AppContainer
from nutriscan.domain.profile import ActivityLevel, FitnessGoal, Gender, HealthProfile
from nutriscan.services.analysis import AnalysisClient, AnalysisService
from nutriscan.services.cache import InMemoryCache
from nutriscan.services.products import ProductClient, ProductService
from nutriscan.services.scans import ScanService
from nutriscan.services.session import ProfileRepository, SessionService

GRANOLA_BARCODE = "3017620422003"


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[UUID, HealthProfile] = field(default_factory=dict)
    saves: int = 0

    def get_profile(self, user_id: UUID) -> HealthProfile | None:
        return self.profiles.get(user_id)

    def save_profile(self, user_id: UUID, profile: HealthProfile) -> None:
        self.saves += 1
        self.profiles[user_id] = profile

    def delete_profile(self, user_id: UUID) -> None:
        self.profiles.pop(user_id, None)


@dataclass
class FakeProductClient(ProductClient):
    """Fake product database returning one known granola bar."""

    products: dict[str, dict[str, object]] = field(
        default_factory=lambda: {
            GRANOLA_BARCODE: {
                "product_name": "Honey Granola Bar",
                "serving_size": "50 g",
                "ingredients_text": (
                    "Oats, High-Fructose Corn Syrup, Peanuts, Sugar, Sodium Chloride"
                ),
                "nutriscore_grade": "d",
                "nutriments": {
                    "energy-kcal_100g": 200,
                    "proteins_100g": 8,
                    "carbohydrates_100g": 60,
                    "fat_100g": 10,
                    "sugars_100g": 30,
                    "sodium_100g": 0.5,
                    "energy-kcal_unit": "kcal",
                },
            }
        }
    )
    calls: int = 0

    async def fetch_product(
        self, barcode: str, fields: tuple[str, ...]
    ) -> dict[str, object]:
        self.calls += 1
        product = self.products.get(barcode)
        if product is None:
            return {"status": 0, "status_verbose": "product not found"}
        return {"status": 1, "code": barcode, "product": product}


@dataclass
class FakeAnalysisClient(AnalysisClient):
    """Fake AI client returning canned meal or product payloads."""

    meal_payload: dict[str, object] = field(
        default_factory=lambda: {
            "meal_name": "Rice and lentil curry",
            "estimated_calories": 650,
            "macros": {"protein": 22, "carbohydrates": 95, "fat": 18},
            "micronutrients": {
                "saturated_fat": 4,
                "cholesterol": None,
                "sodium": 800,
                "potassium": None,
                "fiber": 12,
                "sugar": 6,
            },
            "ingredients": [
                {"name": "Rice", "estimated_weight_grams": 200},
                {"name": "Lentil curry", "estimated_weight_grams": 250},
            ],
            "health_analysis": "Balanced meal.",
            "portion_advice": "Reduce the rice slightly.",
            "is_recommended": True,
            "personalized_warnings": [],
            "alternative_suggestions": ["Brown rice"],
        }
    )
    product_payload: dict[str, object] = field(
        default_factory=lambda: {
            "warnings": [
                {
                    "type": "allergen",
                    "trigger_ingredient": "Peanuts",
                    "message": "You listed peanuts as an allergy.",
                }
            ],
            "alternative_suggestions": ["Oat bar without nuts"],
        }
    )
    prompts: list[str] = field(default_factory=list)
    images: list[str | None] = field(default_factory=list)

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
        self.prompts.append(prompt)
        self.images.append(image_data_url)
        if schema_name == "meal_analysis":
            return self.meal_payload
        return self.product_payload


def make_profile(**overrides: object) -> HealthProfile:
    """Return the reference profile: 25-year-old sedentary male, 175 cm, 70 kg."""
    values: dict[str, object] = {
        "gender": Gender.MALE,
        "age": 25,
        "height_cm": 175,
        "weight_kg": 70,
        "activity_level": ActivityLevel.SEDENTARY,
        "fitness_goal": FitnessGoal.MAINTAIN_WEIGHT,
    }
    values.update(overrides)
    return HealthProfile(**values)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="test-header.test-payload.test-signature",
        openai_api_key="openai-key",
    )


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def session_service(profile_repository: InMemoryProfileRepository) -> SessionService:
    return SessionService(profile_repository, today=lambda: date(2026, 10, 19))


@pytest.fixture
def product_client() -> FakeProductClient:
    return FakeProductClient()


@pytest.fixture
def analysis_client() -> FakeAnalysisClient:
    return FakeAnalysisClient()


@pytest.fixture
def product_service(product_client: FakeProductClient) -> ProductService:
    return ProductService(client=product_client, cache=InMemoryCache())


@pytest.fixture
def analysis_service(analysis_client: FakeAnalysisClient) -> AnalysisService:
    return AnalysisService(
        client=analysis_client,
        meal_model="gpt-5.2",
        product_model="gpt-5-mini",
        reasoning_effort=None,
        store=False,
    )


@pytest.fixture
def scan_service(
    session_service: SessionService,
    product_service: ProductService,
    analysis_service: AnalysisService,
) -> ScanService:
    return ScanService(
        session_service=session_service,
        product_service=product_service,
        analysis_service=analysis_service,
    )


@pytest.fixture
def container(
    settings: Settings,
    session_service: SessionService,
    product_service: ProductService,
    analysis_service: AnalysisService,
    scan_service: ScanService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        session_service=session_service,
        product_service=product_service,
        analysis_service=analysis_service,
        scan_service=scan_service,
        close_resources=close_resources,
    )
