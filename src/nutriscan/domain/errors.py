"""Errors raised by the nutrition engine and its collaborators."""


class NutriscanError(Exception):
    """Base class for recoverable application errors."""


class InvalidProfileError(NutriscanError):
    """Health profile violates the onboarding invariants."""


class InvalidServingInputError(NutriscanError):
    """Serving size or serving count cannot be used for scaling."""


class MalformedAllergenTermError(NutriscanError):
    """User-entered allergen terms that cannot form a whole-word match."""

    def __init__(self, terms: list[str]) -> None:
        self.terms = terms
        joined = ", ".join(repr(term) for term in terms)
        super().__init__(f"Allergen terms cannot be matched as words: {joined}")


class ProductNotFoundError(NutriscanError):
    """Barcode is unknown to the product database."""

    def __init__(self, barcode: str) -> None:
        self.barcode = barcode
        super().__init__(f"Product not found for barcode {barcode}")


class AnalysisError(NutriscanError):
    """AI analysis failed or returned unusable output."""


class ProfileNotFoundError(NutriscanError):
    """No health profile has been stored for the user."""
