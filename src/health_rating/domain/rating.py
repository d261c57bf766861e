"""Domain models for health rating analysis."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class NutrientGuideline:
    """Per-100g thresholds for a tracked nutrient."""

    key: str
    low: float
    high: float
    weight: float
    is_positive: bool
    bioavailability: float

    @property
    def label(self) -> str:
        """Human-readable nutrient name derived from the key."""
        return self.key.removesuffix("_100g").replace("_", " ")


@dataclass(frozen=True)
class IngredientRule:
    """A bucket of lexical terms sharing a weight and a reason."""

    category: str
    match_terms: tuple[str, ...]
    weight: float
    reason: str


@dataclass(frozen=True)
class CategoryProfile:
    """Keyword profile adjusting scores for a product category."""

    category: str
    keywords: tuple[str, ...]
    nutritional_focus: tuple[str, ...]
    score_adjustment: float
    nutrient_multipliers: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ScoreContribution:
    """Score produced by one analyzer plus its explanation lines."""

    score: float
    analysis: tuple[str, ...]


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of a health rating computation."""

    score: float
    analysis: tuple[str, ...]
    rating: str
    color: str
    confidence: float
    data_completeness: float
    partial_data: bool = False
    error: dict[str, object] | None = None

    @property
    def is_fallback(self) -> bool:
        """Whether this result is a safe default rather than a computed rating."""
        return self.error is not None


class RatingErrorKind(StrEnum):
    """Kinds of failure the rating pipeline can report."""

    MISSING_DATA = "MissingData"
    CALCULATION = "CalculationError"
    VALIDATION = "ValidationError"


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful stage outcome."""

    value: T


@dataclass(frozen=True)
class Err:
    """Failed stage outcome."""

    kind: RatingErrorKind
    message: str
    context: dict[str, object] = field(default_factory=dict)


Outcome = Ok | Err
