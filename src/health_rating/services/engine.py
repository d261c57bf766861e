"""Health rating engine: blends analyzer scores and validates the result.

Stages hand back ``Ok``/``Err`` outcomes instead of raising; ``compute`` turns any
``Err`` into a safe default result, so callers never see an exception.
"""

import logging
from dataclasses import dataclass, field

from health_rating.clock import Clock, utc_now
from health_rating.domain.products import NEUTRAL_RATING, ProductSnapshot
from health_rating.domain.rating import (
    AnalysisResult,
    CategoryProfile,
    Err,
    IngredientRule,
    NutrientGuideline,
    Ok,
    Outcome,
    RatingErrorKind,
)
from health_rating.domain.rules import (
    CATEGORY_PROFILES,
    INGREDIENT_ALIASES,
    INGREDIENT_RULES,
    NUTRIENT_GUIDELINES,
)
from health_rating.services.baseline import MAX_SCORE, MIN_SCORE, baseline_score
from health_rating.services.categories import detect_category
from health_rating.services.ingredients import analyze_ingredients, parse_ingredients
from health_rating.services.nutrients import (
    analyze_nutrients,
    parse_number,
    resolve_serving_size,
    validate_nutriments,
)

_logger = logging.getLogger(__name__)

# (previous score weight, new contribution weight)
NUTRIENT_BLEND = (0.4, 0.6)
INGREDIENT_BLEND = (0.6, 0.4)
UNREALISTIC_NUTRIENT_VALUE = 100
CONTRADICTION_SCORE = 4.5
NEGATIVE_PHRASES = ("high in sugar", "high in fat", "processed")

_RATING_LABELS = (
    (4.5, "Excellent Choice"),
    (4.0, "Healthy Choice"),
    (3.0, "Moderately Healthy"),
    (2.0, "Less Healthy"),
)
_RATING_COLORS = ((4.0, "green"), (3.0, "yellow"), (2.0, "orange"))


def rating_label(score: float) -> str:
    """Map a score to its rating label."""
    for threshold, label in _RATING_LABELS:
        if score >= threshold:
            return label
    return "Not Recommended"


def rating_color(score: float) -> str:
    """Map a score to its display color."""
    for threshold, color in _RATING_COLORS:
        if score >= threshold:
            return color
    return "red"


def data_completeness(product: ProductSnapshot) -> float:
    """Percentage of name, category, nutriments and ingredients present."""
    present = [
        bool(product.name),
        bool(product.category),
        bool(product.nutriments),
        bool(parse_ingredients(product.ingredients)),
    ]
    return sum(present) / len(present) * 100


@dataclass
class HealthRatingEngine:
    """Deterministic rule engine producing a 1-5 health rating."""

    guidelines: tuple[NutrientGuideline, ...] = NUTRIENT_GUIDELINES
    ingredient_rules: tuple[IngredientRule, ...] = INGREDIENT_RULES
    ingredient_aliases: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: INGREDIENT_ALIASES
    )
    category_profiles: tuple[CategoryProfile, ...] = CATEGORY_PROFILES
    clock: Clock = utc_now

    def compute(self, product: ProductSnapshot | None) -> AnalysisResult:
        """Rate a product; failures come back as a fallback result."""
        outcome = self._evaluate(product)
        if isinstance(outcome, Ok):
            return outcome.value
        return self._fallback(product, outcome)

    def _evaluate(self, product: ProductSnapshot | None) -> Outcome:
        if product is None:
            return Err(RatingErrorKind.MISSING_DATA, "No product data provided")
        nutriments = product.nutriments or {}
        ingredients = parse_ingredients(product.ingredients)
        if not nutriments and not ingredients:
            return Err(
                RatingErrorKind.MISSING_DATA,
                "Insufficient data: no nutriments or ingredients",
            )
        try:
            result = self._calculate(product, nutriments, ingredients)
            return _validate(result, nutriments)
        except Exception as exc:  # noqa: BLE001
            return Err(
                RatingErrorKind.CALCULATION,
                f"Calculation failed: {exc}",
                {"exception": type(exc).__name__},
            )

    def _calculate(
        self,
        product: ProductSnapshot,
        nutriments: dict[str, object],
        ingredients: list[str],
    ) -> AnalysisResult:
        profile = detect_category(
            product.name, product.category, self.category_profiles
        )
        final_score = baseline_score(nutriments)
        analysis: list[str] = []

        if nutriments:
            contribution = analyze_nutrients(
                validate_nutriments(nutriments, self.guidelines),
                profile,
                baseline=final_score,
                serving_size=resolve_serving_size(nutriments),
                guidelines=self.guidelines,
            )
            final_score = (
                final_score * NUTRIENT_BLEND[0] + contribution.score * NUTRIENT_BLEND[1]
            )
            analysis.extend(contribution.analysis)

        if ingredients:
            contribution = analyze_ingredients(
                ingredients, self.ingredient_rules, self.ingredient_aliases
            )
            final_score = (
                final_score * INGREDIENT_BLEND[0]
                + contribution.score * INGREDIENT_BLEND[1]
            )
            analysis.extend(contribution.analysis)

        if profile is not None:
            final_score *= profile.score_adjustment
            analysis.append(
                f"Category adjustment: {profile.category} "
                f"(x{profile.score_adjustment:.2f})"
            )

        partial = not (nutriments and ingredients)
        if partial:
            source = "nutriments" if nutriments else "ingredients"
            analysis.append(f"Partial data: rating based on {source} only")

        score = max(MIN_SCORE, min(MAX_SCORE, round(final_score, 1)))
        confidence = (
            0.4 * bool(nutriments)
            + 0.3 * bool(ingredients)
            + 0.2 * bool(product.nutriscore_grade)
            + 0.1 * bool(product.category)
        )
        return AnalysisResult(
            score=score,
            analysis=tuple(analysis),
            rating=rating_label(score),
            color=rating_color(score),
            confidence=min(1.0, round(confidence, 2)),
            data_completeness=data_completeness(product),
            partial_data=partial,
        )

    def _fallback(self, product: ProductSnapshot | None, err: Err) -> AnalysisResult:
        summary = product.summary() if product is not None else None
        context: dict[str, object] = {
            "timestamp": self.clock().isoformat(),
            "kind": err.kind.value,
            "message": err.message,
            "product": summary,
            **err.context,
        }
        level = (
            logging.WARNING
            if err.kind is RatingErrorKind.MISSING_DATA
            else logging.ERROR
        )
        _logger.log(
            level,
            "Health rating fallback: kind=%s message=%s product=%s at=%s",
            err.kind.value,
            err.message,
            summary,
            context["timestamp"],
        )
        label = (
            "Insufficient Data"
            if err.kind is RatingErrorKind.MISSING_DATA
            else "Analysis Failed"
        )
        return AnalysisResult(
            score=NEUTRAL_RATING,
            analysis=(f"Error: {err.message}",),
            rating=label,
            color="gray",
            confidence=0.0,
            data_completeness=data_completeness(product) if product else 0.0,
            error=context,
        )


def _validate(result: AnalysisResult, nutriments: dict[str, object]) -> Outcome:
    """Reject results that are internally inconsistent."""
    if not MIN_SCORE <= result.score <= MAX_SCORE:
        return Err(
            RatingErrorKind.VALIDATION, f"Score {result.score} is outside [1, 5]"
        )
    for key, raw in nutriments.items():
        value = parse_number(raw)
        if (
            value is not None
            and value > UNREALISTIC_NUTRIENT_VALUE
            and "calories" not in key.lower()
        ):
            return Err(
                RatingErrorKind.VALIDATION,
                f"Unrealistic nutrient value: {key}={value}",
                {"nutrient": key},
            )
    text = " ".join(result.analysis).lower()
    if result.score > CONTRADICTION_SCORE and any(
        phrase in text for phrase in NEGATIVE_PHRASES
    ):
        return Err(
            RatingErrorKind.VALIDATION,
            f"Analysis contradicts score {result.score}",
        )
    return Ok(result)
