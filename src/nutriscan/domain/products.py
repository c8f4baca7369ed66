"""Product database models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Product:
    """Packaged product as returned by the product database.

    ``nutriments`` holds per-100g values keyed like Open Food Facts
    (``energy-kcal_100g``, ``sodium_100g``); sodium, potassium and
    cholesterol are grams there.
    """

    barcode: str
    name: str | None
    nutriments: dict[str, float] = field(default_factory=dict)
    serving_size: str | None = None
    ingredients_text: str | None = None
    allergens_from_ingredients: str | None = None
    nutriscore_grade: str | None = None
    image_front_url: str | None = None
