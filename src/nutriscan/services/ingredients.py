"""Ingredient text simplification and allergen/condition highlighting."""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from nutriscan.domain.annotations import (
    AnnotatedText,
    MatchedSpan,
    SpanKind,
    Substitution,
)
from nutriscan.domain.errors import MalformedAllergenTermError
from nutriscan.domain.profile import HealthProfile

SIMPLIFICATIONS: dict[str, str] = {
    "high-fructose corn syrup": "Sugar (from Corn)",
    "high fructose corn syrup": "Sugar (from Corn)",
    "sodium chloride": "Salt",
    "monosodium glutamate": "MSG (Flavor Enhancer)",
    "sodium bicarbonate": "Baking Soda",
    "sucrose": "Sugar",
    "dextrose": "Sugar (Glucose)",
    "ascorbic acid": "Vitamin C",
    "tocopherols": "Vitamin E",
    "retinyl palmitate": "Vitamin A",
    "cholecalciferol": "Vitamin D3",
    "thiamine mononitrate": "Vitamin B1",
    "riboflavin": "Vitamin B2",
    "pyridoxine hydrochloride": "Vitamin B6",
    "folic acid": "Folate (Vitamin B9)",
    "partially hydrogenated vegetable oil": "Hydrogenated Oil (Trans Fat)",
    "maltodextrin": "Maltodextrin (Processed Starch)",
    "xanthan gum": "Xanthan Gum (Thickener)",
    "soy lecithin": "Soy Lecithin (Emulsifier)",
    "potassium sorbate": "Potassium Sorbate (Preservative)",
    "sodium benzoate": "Sodium Benzoate (Preservative)",
}

DIABETES_TERMS: tuple[str, ...] = ("sugar", "syrup", "glucose", "fructose")
HIGH_BP_TERMS: tuple[str, ...] = ("salt", "sodium")


@dataclass(frozen=True)
class ConditionFlags:
    """Health conditions that trigger ingredient highlighting."""

    is_diabetic: bool = False
    has_high_bp: bool = False

    @classmethod
    def from_profile(cls, profile: HealthProfile) -> "ConditionFlags":
        """Pick the relevant flags from a health profile."""
        return cls(is_diabetic=profile.is_diabetic, has_high_bp=profile.has_high_bp)

    def terms(self) -> list[str]:
        """Return the terms to highlight for the active conditions."""
        terms: list[str] = []
        if self.is_diabetic:
            terms.extend(DIABETES_TERMS)
        if self.has_high_bp:
            terms.extend(HIGH_BP_TERMS)
        return terms


def word_pattern(terms: Iterable[str]) -> re.Pattern[str]:
    """Compile a case-insensitive whole-word alternation of literal terms.

    Longer terms are tried first so "peanut butter" wins over "peanut".
    """
    ordered = sorted(set(terms), key=lambda term: (-len(term), term))
    alternation = "|".join(re.escape(term) for term in ordered)
    return re.compile(rf"(?<!\w)(?:{alternation})(?!\w)", re.IGNORECASE)


_SIMPLIFICATION_PATTERN = word_pattern(SIMPLIFICATIONS)


def parse_allergens(raw: str | Iterable[str]) -> list[str]:
    """Split a comma-separated allergy list into trimmed, lower-cased terms."""
    chunks = raw.split(",") if isinstance(raw, str) else raw
    terms: list[str] = []
    for chunk in chunks:
        term = chunk.strip().lower()
        if term and term not in terms:
            terms.append(term)
    return terms


def simplify(text: str) -> tuple[str, tuple[Substitution, ...]]:
    """Rewrite technical ingredient names into lay terms in one pass."""
    pieces: list[str] = []
    substitutions: list[Substitution] = []
    cursor = 0
    offset = 0
    for match in _SIMPLIFICATION_PATTERN.finditer(text):
        before = text[cursor : match.start()]
        pieces.append(before)
        offset += len(before)
        replacement = SIMPLIFICATIONS[match.group(0).lower()]
        substitutions.append(
            Substitution(
                start=offset,
                end=offset + len(replacement),
                original=match.group(0),
                replacement=replacement,
            )
        )
        pieces.append(replacement)
        offset += len(replacement)
        cursor = match.end()
    pieces.append(text[cursor:])
    return "".join(pieces), tuple(substitutions)


def annotate(
    text: str,
    allergen_terms: str | Iterable[str],
    conditions: ConditionFlags | None = None,
) -> AnnotatedText:
    """Simplify ingredient text and mark allergen and condition terms.

    Passes run in order: simplification, allergens, conditions. A pass never
    matches text already claimed by an earlier one; a substitution whose
    original wording names an allergen is tagged as a whole instead.
    """
    display, substitutions = simplify(text)
    claimed: list[tuple[int, int]] = [(sub.start, sub.end) for sub in substitutions]
    spans: list[MatchedSpan] = []

    allergens = parse_allergens(allergen_terms)
    if allergens:
        malformed = [term for term in allergens if not _has_word_character(term)]
        if malformed:
            raise MalformedAllergenTermError(malformed)
        spans.extend(_substituted_allergens(substitutions, allergens))
        spans.extend(_match(display, allergens, SpanKind.ALLERGEN, claimed))

    condition_terms = (conditions or ConditionFlags()).terms()
    if condition_terms:
        spans.extend(_match(display, condition_terms, SpanKind.CONDITION, claimed))

    spans.sort(key=lambda span: span.start)
    return AnnotatedText(
        original=text,
        text=display,
        substitutions=substitutions,
        spans=tuple(spans),
    )


def _match(
    text: str,
    terms: list[str],
    kind: SpanKind,
    claimed: list[tuple[int, int]],
) -> list[MatchedSpan]:
    lookup = {term.lower(): term for term in terms}
    spans: list[MatchedSpan] = []
    for match in word_pattern(terms).finditer(text):
        start, end = match.span()
        if any(start < taken_end and taken_start < end for taken_start, taken_end in claimed):
            continue
        claimed.append((start, end))
        found = match.group(0).lower()
        spans.append(
            MatchedSpan(
                start=start,
                end=end,
                kind=kind,
                matched_term=lookup.get(found, found),
            )
        )
    return spans


def _substituted_allergens(
    substitutions: tuple[Substitution, ...], allergens: list[str]
) -> list[MatchedSpan]:
    pattern = word_pattern(allergens)
    spans: list[MatchedSpan] = []
    for sub in substitutions:
        match = pattern.search(sub.original)
        if match is None:
            continue
        spans.append(
            MatchedSpan(
                start=sub.start,
                end=sub.end,
                kind=SpanKind.ALLERGEN,
                matched_term=match.group(0).lower(),
            )
        )
    return spans


def _has_word_character(term: str) -> bool:
    return any(char.isalnum() for char in term)
