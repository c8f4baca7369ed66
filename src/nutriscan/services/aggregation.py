"""Folding nutrient records into the daily log."""

from collections.abc import Iterable
from dataclasses import dataclass, replace

from nutriscan.domain.analysis import MealAnalysis
from nutriscan.domain.nutrients import (
    MACRO_FIELDS,
    MICRO_FIELDS,
    DailyLog,
    LoggedNutrients,
    NutritionGoals,
)
from nutriscan.services.units import TARGET_UNITS


def empty_log() -> DailyLog:
    """Return the log for a fresh day."""
    return DailyLog.empty()


def fold(current: DailyLog, record: LoggedNutrients) -> DailyLog:
    """Add every reported field of ``record`` to ``current``.

    Returns a new log; neither argument is modified. Folding the same record
    twice counts it twice.
    """
    if record.is_empty():
        return current
    macros = replace(
        current.macros,
        **{
            name: getattr(current.macros, name) + amount
            for name, amount in record.macros.items()
        },
    )
    micros = replace(
        current.micros,
        **{
            name: getattr(current.micros, name) + amount
            for name, amount in record.micros.items()
        },
    )
    return DailyLog(macros=macros, micros=micros)


def fold_all(current: DailyLog, records: Iterable[LoggedNutrients]) -> DailyLog:
    """Fold records in order."""
    for record in records:
        current = fold(current, record)
    return current


def record_from_meal_analysis(analysis: MealAnalysis) -> LoggedNutrients:
    """Convert an AI meal estimate into a record, keeping unreported fields absent."""
    macros: dict[str, float] = {}
    if analysis.estimated_calories is not None:
        macros["calories"] = analysis.estimated_calories
    for name in ("carbohydrates", "protein", "fat"):
        value = getattr(analysis.macros, name)
        if value is not None:
            macros[name] = value
    micros = {
        name: value
        for name, value in analysis.micronutrients.model_dump().items()
        if value is not None
    }
    return LoggedNutrients(macros=macros, micros=micros)


@dataclass(frozen=True)
class NutrientProgress:
    """Consumption against one daily target."""

    nutrient: str
    unit: str
    consumed: float
    goal: float

    @property
    def remaining(self) -> float:
        """Amount left before reaching the goal, never negative."""
        return max(self.goal - self.consumed, 0.0)

    @property
    def percent(self) -> float | None:
        """Share of the goal consumed, or None when the goal is zero."""
        if self.goal <= 0:
            return None
        return self.consumed / self.goal * 100


def progress(goals: NutritionGoals, log: DailyLog) -> list[NutrientProgress]:
    """Return per-nutrient progress rows, macros first."""
    rows = [
        NutrientProgress(
            nutrient=name,
            unit=TARGET_UNITS[name].value,
            consumed=getattr(log.macros, name),
            goal=getattr(goals.macros, name),
        )
        for name in MACRO_FIELDS
    ]
    rows.extend(
        NutrientProgress(
            nutrient=name,
            unit=TARGET_UNITS[name].value,
            consumed=getattr(log.micros, name),
            goal=getattr(goals.micros, name),
        )
        for name in MICRO_FIELDS
    )
    return rows
