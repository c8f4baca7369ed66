"""Models for annotated ingredient text."""

from dataclasses import dataclass
from enum import Enum


class SpanKind(str, Enum):
    """Why a span of ingredient text was highlighted."""

    ALLERGEN = "allergen"
    CONDITION = "condition"


@dataclass(frozen=True)
class MatchedSpan:
    """Highlighted span; offsets index into ``AnnotatedText.text``."""

    start: int
    end: int
    kind: SpanKind
    matched_term: str


@dataclass(frozen=True)
class Substitution:
    """Technical ingredient name rewritten into a lay term."""

    start: int
    end: int
    original: str
    replacement: str


@dataclass(frozen=True)
class AnnotatedText:
    """Ingredient text after simplification and highlighting."""

    original: str
    text: str
    substitutions: tuple[Substitution, ...] = ()
    spans: tuple[MatchedSpan, ...] = ()

    def spans_of(self, kind: SpanKind) -> list[MatchedSpan]:
        """Return spans of one kind in text order."""
        return [span for span in self.spans if span.kind is kind]

    def segment(self, span: MatchedSpan) -> str:
        """Return the display text covered by a span."""
        return self.text[span.start : span.end]
