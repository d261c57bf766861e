"""Nutrient scoring against per-100g guidelines."""

import math

from health_rating.domain.rating import (
    CategoryProfile,
    NutrientGuideline,
    ScoreContribution,
)
from health_rating.domain.rules import NUTRIENT_GUIDELINES

DEFAULT_SERVING_SIZE = 100.0
VALIDATION_CEILING_FACTOR = 5


def parse_number(value: object) -> float | None:
    """Parse a numeric nutrient value, returning None when it is unusable."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def validate_nutriments(
    nutriments: dict[str, object],
    guidelines: tuple[NutrientGuideline, ...] = NUTRIENT_GUIDELINES,
) -> dict[str, float]:
    """Keep guideline nutrients, clamped to [0, 5x the guideline high]."""
    validated: dict[str, float] = {}
    for guideline in guidelines:
        if guideline.key not in nutriments:
            continue
        value = parse_number(nutriments[guideline.key])
        if value is None:
            continue
        ceiling = guideline.high * VALIDATION_CEILING_FACTOR
        validated[guideline.key] = max(0.0, min(value, ceiling))
    return validated


def resolve_serving_size(nutriments: dict[str, object]) -> float:
    """Return the declared serving size in grams, defaulting to 100."""
    value = parse_number(nutriments.get("serving_size"))
    if value is None or value <= 0:
        return DEFAULT_SERVING_SIZE
    return value


def analyze_nutrients(  # noqa: PLR0913
    nutrients: dict[str, float],
    profile: CategoryProfile | None,
    baseline: float,
    serving_size: float = DEFAULT_SERVING_SIZE,
    guidelines: tuple[NutrientGuideline, ...] = NUTRIENT_GUIDELINES,
) -> ScoreContribution:
    """Score validated nutrients starting from the baseline macro score."""
    multipliers = profile.nutrient_multipliers if profile else {}
    score = baseline
    analysis: list[str] = []

    for guideline in guidelines:
        multiplier = multipliers.get(guideline.key, 1.0)
        adj_low = guideline.low * serving_size * multiplier / 100
        adj_high = guideline.high * serving_size * multiplier / 100
        value = nutrients.get(guideline.key, 0.0)
        impact = _impact_factor(value, adj_low, adj_high)
        label = guideline.label

        if guideline.is_positive:
            if value >= adj_high:
                score += guideline.weight * impact
                analysis.append(
                    f"Excellent source of {label} "
                    f"({guideline.bioavailability:.0%} bioavailable)"
                )
            elif value >= adj_low:
                score += (guideline.weight / 2) * impact
                analysis.append(f"Good source of {label}")
            else:
                score -= guideline.weight / 3
                analysis.append(f"{label.capitalize()} content could be improved")
        elif value >= adj_high:
            score += guideline.weight * impact
            analysis.append(f"Consider reducing {label}: high in {label}")
        elif value <= adj_low:
            score -= guideline.weight * impact
            analysis.append(f"Good: low in {label}")

    return ScoreContribution(score=score, analysis=tuple(analysis))


def _impact_factor(value: float, adj_low: float, adj_high: float) -> float:
    """Damping term in [0, 1], measured against the half-width of the range."""
    optimal_range = (adj_high - adj_low) / 2
    if optimal_range == 0:
        return 0.0
    deviation = abs(value - optimal_range)
    return 1 - min(deviation / optimal_range, 1)
