"""Nutrient target, record and daily log models."""

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field

MACRO_FIELDS: tuple[str, ...] = ("calories", "carbohydrates", "protein", "fat")
MICRO_FIELDS: tuple[str, ...] = (
    "saturated_fat",
    "polyunsaturated_fat",
    "monounsaturated_fat",
    "trans_fat",
    "cholesterol",
    "sodium",
    "potassium",
    "fiber",
    "sugar",
    "vitamin_a",
    "vitamin_c",
    "calcium",
    "iron",
)


@dataclass(frozen=True)
class MacroGoals:
    """Macronutrient amounts: calories in kcal, the rest in grams."""

    calories: float
    carbohydrates: float
    protein: float
    fat: float


@dataclass(frozen=True)
class MicroGoals:
    """Micronutrient amounts.

    Grams: the four fat categories, fiber, sugar. Milligrams: cholesterol,
    sodium, potassium, vitamin C, calcium, iron. Micrograms (RAE): vitamin A.
    """

    saturated_fat: float
    polyunsaturated_fat: float
    monounsaturated_fat: float
    trans_fat: float
    cholesterol: float
    sodium: float
    potassium: float
    fiber: float
    sugar: float
    vitamin_a: float
    vitamin_c: float
    calcium: float
    iron: float


@dataclass(frozen=True)
class NutritionGoals:
    """Daily targets derived from a health profile."""

    macros: MacroGoals
    micros: MicroGoals

    def to_dict(self) -> dict[str, dict[str, float]]:
        """Serialize to plain nested dicts."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, float]]) -> "NutritionGoals":
        """Rebuild goals from :meth:`to_dict` output."""
        return cls(
            macros=MacroGoals(**{k: float(data["macros"][k]) for k in MACRO_FIELDS}),
            micros=MicroGoals(**{k: float(data["micros"][k]) for k in MICRO_FIELDS}),
        )


@dataclass(frozen=True)
class DailyLog:
    """Cumulative consumption for the current day.

    Has the same shape and units as :class:`NutritionGoals`.
    """

    macros: MacroGoals
    micros: MicroGoals

    @classmethod
    def empty(cls) -> "DailyLog":
        """Return an all-zero log."""
        return cls(
            macros=MacroGoals(**dict.fromkeys(MACRO_FIELDS, 0.0)),
            micros=MicroGoals(**dict.fromkeys(MICRO_FIELDS, 0.0)),
        )

    def to_dict(self) -> dict[str, dict[str, float]]:
        """Serialize to plain nested dicts."""
        return asdict(self)


@dataclass(frozen=True)
class LoggedNutrients:
    """Partial nutrient amounts produced by one scan or analysis.

    Missing keys mean "not reported". Keys must be known field names so a
    mistyped or wrongly-unitized source fails loudly instead of being ignored.
    """

    macros: Mapping[str, float] = field(default_factory=dict)
    micros: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_keys("macro", self.macros, MACRO_FIELDS)
        _check_keys("micro", self.micros, MICRO_FIELDS)
        object.__setattr__(self, "macros", _amounts("macro", self.macros))
        object.__setattr__(self, "micros", _amounts("micro", self.micros))

    def is_empty(self) -> bool:
        """Return True when no nutrient is reported."""
        return not self.macros and not self.micros


def _check_keys(kind: str, values: Mapping[str, float], allowed: tuple[str, ...]) -> None:
    unknown = sorted(set(values) - set(allowed))
    if unknown:
        raise ValueError(f"Unknown {kind} nutrient fields: {', '.join(unknown)}")


def _amounts(kind: str, values: Mapping[str, float]) -> dict[str, float]:
    amounts = {name: float(value) for name, value in values.items()}
    invalid = sorted(
        name for name, amount in amounts.items() if not math.isfinite(amount) or amount < 0
    )
    if invalid:
        raise ValueError(
            f"{kind.capitalize()} nutrient amounts must be finite and non-negative: "
            f"{', '.join(invalid)}"
        )
    return amounts

