"""Lexical ingredient analysis with aliasing and positional weighting."""

from health_rating.domain.rating import IngredientRule, ScoreContribution
from health_rating.domain.rules import (
    INGREDIENT_ALIASES,
    INGREDIENT_RULES,
    PROCESSING_METHODS,
)

NEUTRAL_INGREDIENT_SCORE = 3.0


def parse_ingredients(ingredients: str | list[str] | None) -> list[str]:
    """Split an ingredient declaration into trimmed, non-empty entries."""
    if isinstance(ingredients, str):
        raw: list[object] = list(ingredients.split(","))
    elif isinstance(ingredients, list | tuple):
        raw = list(ingredients)
    else:
        return []
    return [
        str(item).strip() for item in raw if item is not None and str(item).strip()
    ]


def analyze_ingredients(
    ingredients: list[str],
    rules: tuple[IngredientRule, ...] = INGREDIENT_RULES,
    aliases: dict[str, tuple[str, ...]] = INGREDIENT_ALIASES,
) -> ScoreContribution:
    """Score parsed ingredients; earlier entries weigh more."""
    score = NEUTRAL_INGREDIENT_SCORE
    analysis: list[str] = []
    total = len(ingredients)

    for index, ingredient in enumerate(ingredients):
        position_weight = 1 - index / total
        lowered = ingredient.lower()
        for rule in rules:
            if not _matches(lowered, rule, aliases):
                continue
            score += rule.weight * position_weight
            analysis.append(
                f"{index + 1}. {ingredient}: {rule.reason}{_processing_note(lowered)}"
            )

    return ScoreContribution(score=score, analysis=tuple(analysis))


def _matches(
    ingredient: str, rule: IngredientRule, aliases: dict[str, tuple[str, ...]]
) -> bool:
    for term in rule.match_terms:
        lowered_term = term.lower()
        if lowered_term in ingredient:
            return True
        for main_term, alias_terms in aliases.items():
            if main_term in lowered_term and any(
                alias in ingredient for alias in alias_terms
            ):
                return True
    return False


def _processing_note(ingredient: str) -> str:
    for keyword, impact in PROCESSING_METHODS:
        if keyword in ingredient:
            return f" ({impact})"
    return ""
