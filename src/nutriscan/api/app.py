"""FastAPI application factory."""

import base64
import binascii
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from nutriscan.api.schemas import (
    AnnotatedTextResponse,
    AnnotatePayload,
    MealPayload,
    NutrientMap,
    ProfilePayload,
    ProfileResponse,
    ProgressRow,
    ServingsPayload,
)
from nutriscan.app_logging import configure_logging
from nutriscan.containers import AppContainer
from nutriscan.domain.errors import (
    AnalysisError,
    InvalidProfileError,
    InvalidServingInputError,
    MalformedAllergenTermError,
    ProductNotFoundError,
    ProfileNotFoundError,
)
from nutriscan.services.ingredients import ConditionFlags, annotate

_UNPROCESSABLE = 422

_ERROR_STATUS: dict[type[Exception], int] = {
    InvalidProfileError: _UNPROCESSABLE,
    InvalidServingInputError: _UNPROCESSABLE,
    MalformedAllergenTermError: _UNPROCESSABLE,
    ProfileNotFoundError: status.HTTP_404_NOT_FOUND,
    ProductNotFoundError: status.HTTP_404_NOT_FOUND,
    AnalysisError: status.HTTP_502_BAD_GATEWAY,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    async def handle_domain_error(request: Request, exc: Exception) -> JSONResponse:
        status_code = _ERROR_STATUS[type(exc)]
        logger.info("%s %s -> %s: %s", request.method, request.url.path, status_code, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    for error_type in _ERROR_STATUS:
        app.add_exception_handler(error_type, handle_domain_error)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.put("/users/{user_id}/profile")
    async def put_profile(
        user_id: UUID, payload: ProfilePayload, request: Request, rederive: bool = False
    ) -> ProfileResponse:
        """Complete onboarding, or re-onboard with ``rederive=true``."""
        sessions = _container(request).session_service
        profile = payload.to_domain()
        if rederive:
            stored = sessions.update_profile(user_id, profile)
        else:
            stored = sessions.complete_onboarding(user_id, profile)
        return ProfileResponse.from_domain(stored)

    @app.get("/users/{user_id}/profile")
    async def get_profile(user_id: UUID, request: Request) -> ProfileResponse:
        """Return the stored profile."""
        profile = _container(request).session_service.get_profile(user_id)
        return ProfileResponse.from_domain(profile)

    @app.delete("/users/{user_id}/profile", status_code=status.HTTP_204_NO_CONTENT)
    async def logout(user_id: UUID, request: Request) -> None:
        """Forget the session and stored profile."""
        _container(request).session_service.logout(user_id)

    @app.get("/users/{user_id}/goals")
    async def get_goals(user_id: UUID, request: Request) -> NutrientMap:
        """Return the user's daily targets."""
        return NutrientMap.from_log(_container(request).session_service.get_goals(user_id))

    @app.get("/users/{user_id}/log")
    async def get_log(user_id: UUID, request: Request) -> NutrientMap:
        """Return today's consumption."""
        return NutrientMap.from_log(_container(request).session_service.get_log(user_id))

    @app.post("/users/{user_id}/log")
    async def post_log(user_id: UUID, payload: NutrientMap, request: Request) -> NutrientMap:
        """Fold a nutrient record into today's log."""
        try:
            record = payload.to_record()
        except ValueError as exc:
            raise HTTPException(
                status_code=_UNPROCESSABLE, detail=str(exc)
            ) from exc
        daily_log = await _container(request).session_service.log_record(user_id, record)
        return NutrientMap.from_log(daily_log)

    @app.post("/users/{user_id}/log/undo")
    async def undo_log(user_id: UUID, request: Request) -> NutrientMap:
        """Revert the latest log entry."""
        daily_log = await _container(request).session_service.undo_last(user_id)
        return NutrientMap.from_log(daily_log)

    @app.delete("/users/{user_id}/log")
    async def reset_log(user_id: UUID, request: Request) -> NutrientMap:
        """Start the day over."""
        daily_log = await _container(request).session_service.reset_day(user_id)
        return NutrientMap.from_log(daily_log)

    @app.get("/users/{user_id}/progress")
    async def get_progress(user_id: UUID, request: Request) -> list[ProgressRow]:
        """Return consumption against each target."""
        rows = _container(request).session_service.get_progress(user_id)
        return [ProgressRow.from_domain(row) for row in rows]

    @app.get("/users/{user_id}/products/{barcode}")
    async def scan_product(user_id: UUID, barcode: str, request: Request) -> dict[str, object]:
        """Look up a product with personalized highlighting and advice."""
        scan = await _container(request).scan_service.scan_product(user_id, barcode)
        product = scan.product
        return {
            "product": {
                "barcode": product.barcode,
                "name": product.name,
                "serving_size": product.serving_size,
                "nutriscore_grade": product.nutriscore_grade,
                "image_front_url": product.image_front_url,
                "nutriments": product.nutriments,
            },
            "serving_grams": scan.serving_grams,
            "per_serving": NutrientMap.from_record(scan.per_serving).model_dump(),
            "ingredients": (
                AnnotatedTextResponse.from_domain(scan.ingredients).model_dump()
                if scan.ingredients
                else None
            ),
            "advice": scan.advice.model_dump() if scan.advice else None,
            "advice_error": scan.advice_error,
        }

    @app.post("/users/{user_id}/products/{barcode}/log")
    async def log_product(
        user_id: UUID, barcode: str, payload: ServingsPayload, request: Request
    ) -> NutrientMap:
        """Add servings of a product to today's log."""
        daily_log = await _container(request).scan_service.log_product(
            user_id,
            barcode,
            servings=payload.servings,
            serving_grams=payload.serving_grams,
        )
        return NutrientMap.from_log(daily_log)

    @app.post("/users/{user_id}/meals/analyze")
    async def analyze_meal(
        user_id: UUID, payload: MealPayload, request: Request
    ) -> dict[str, object]:
        """Analyze a meal photo, optionally logging the estimate."""
        try:
            image_bytes = base64.b64decode(payload.image_base64, validate=True)
        except binascii.Error as exc:
            raise HTTPException(
                status_code=_UNPROCESSABLE,
                detail="image_base64 is not valid base64",
            ) from exc
        scans = _container(request).scan_service
        if payload.log:
            scan, daily_log = await scans.log_meal(user_id, image_bytes)
        else:
            scan, daily_log = await scans.analyze_meal(user_id, image_bytes), None
        return {
            "analysis": scan.analysis.model_dump(),
            "record": NutrientMap.from_record(scan.record).model_dump(),
            "daily_log": NutrientMap.from_log(daily_log).model_dump() if daily_log else None,
        }

    @app.post("/ingredients/annotate")
    async def annotate_ingredients(payload: AnnotatePayload) -> AnnotatedTextResponse:
        """Simplify and highlight an ingredient list."""
        annotated = annotate(
            payload.text,
            payload.allergies,
            ConditionFlags(is_diabetic=payload.is_diabetic, has_high_bp=payload.has_high_bp),
        )
        return AnnotatedTextResponse.from_domain(annotated)

    return app


def _container(request: Request) -> AppContainer:
    return request.app.state.container
