"""Neutral starting score from macronutrient calorie ratios."""

from health_rating.services.nutrients import parse_number

IDEAL_RATIOS = {"protein": 0.25, "carbs": 0.50, "fat": 0.25}
MIN_SCORE = 1.0
MAX_SCORE = 5.0


def baseline_score(nutriments: dict[str, object]) -> float:
    """Score how closely protein/carb/fat calories match the ideal split."""
    calories = {
        "protein": _grams(nutriments, "proteins_100g") * 4,
        "carbs": _grams(nutriments, "carbohydrates_100g") * 4,
        "fat": _grams(nutriments, "fat_100g") * 9,
    }
    total = sum(calories.values()) or 1
    deviation = sum(
        abs(calories[macro] / total - ideal) for macro, ideal in IDEAL_RATIOS.items()
    )
    return max(MIN_SCORE, min(MAX_SCORE, 3 - deviation * 2))


def _grams(nutriments: dict[str, object], key: str) -> float:
    value = parse_number(nutriments.get(key))
    return value if value is not None else 0.0
