"""Barcode and meal-photo scan flows."""

import logging
from dataclasses import dataclass
from uuid import UUID

from nutriscan.domain.analysis import MealAnalysis, ProductAnalysis
from nutriscan.domain.annotations import AnnotatedText
from nutriscan.domain.errors import AnalysisError
from nutriscan.domain.nutrients import DailyLog, LoggedNutrients
from nutriscan.domain.products import Product
from nutriscan.services.aggregation import record_from_meal_analysis
from nutriscan.services.analysis import AnalysisService
from nutriscan.services.ingredients import ConditionFlags, annotate
from nutriscan.services.products import ProductService
from nutriscan.services.servings import parse_serving_size, scale
from nutriscan.services.session import SessionService

DEFAULT_SERVING_GRAMS = 100.0

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductScan:
    """Everything shown to the user after scanning a barcode."""

    product: Product
    serving_grams: float
    per_serving: LoggedNutrients
    ingredients: AnnotatedText | None
    advice: ProductAnalysis | None
    advice_error: str | None = None


@dataclass(frozen=True)
class MealScan:
    """AI meal estimate and the record it would add to the log."""

    analysis: MealAnalysis
    record: LoggedNutrients


@dataclass
class ScanService:
    """Connects product lookups and AI analysis to the user's session."""

    session_service: SessionService
    product_service: ProductService
    analysis_service: AnalysisService

    async def scan_product(self, user_id: UUID, barcode: str) -> ProductScan:
        """Look up a product, highlight its ingredients and ask for advice."""
        profile = self.session_service.get_profile(user_id)
        product = await self.product_service.lookup(barcode)
        serving_grams = parse_serving_size(product.serving_size) or DEFAULT_SERVING_GRAMS
        ingredients = None
        advice = None
        advice_error = None
        if product.ingredients_text:
            ingredients = annotate(
                product.ingredients_text,
                profile.allergies,
                ConditionFlags.from_profile(profile),
            )
            try:
                advice = await self.analysis_service.analyze_product(product, profile)
            except AnalysisError as exc:
                _logger.warning("Product advice unavailable: barcode=%s", barcode)
                advice_error = str(exc)
        return ProductScan(
            product=product,
            serving_grams=serving_grams,
            per_serving=scale(product.nutriments, serving_grams, 1),
            ingredients=ingredients,
            advice=advice,
            advice_error=advice_error,
        )

    async def log_product(
        self,
        user_id: UUID,
        barcode: str,
        servings: float,
        serving_grams: float | None = None,
    ) -> DailyLog:
        """Add ``servings`` of a product to today's log."""
        product = await self.product_service.lookup(barcode)
        grams = (
            serving_grams
            if serving_grams is not None
            else parse_serving_size(product.serving_size) or DEFAULT_SERVING_GRAMS
        )
        record = scale(product.nutriments, grams, servings)
        return await self.session_service.log_record(user_id, record)

    async def analyze_meal(self, user_id: UUID, image_bytes: bytes) -> MealScan:
        """Run the AI meal analysis for the user's profile."""
        profile = self.session_service.get_profile(user_id)
        analysis = await self.analysis_service.analyze_meal(image_bytes, profile)
        return MealScan(analysis=analysis, record=record_from_meal_analysis(analysis))

    async def log_meal(self, user_id: UUID, image_bytes: bytes) -> tuple[MealScan, DailyLog]:
        """Analyze a meal photo and add the estimate to today's log."""
        scan = await self.analyze_meal(user_id, image_bytes)
        daily_log = await self.session_service.log_record(user_id, scan.record)
        return scan, daily_log
