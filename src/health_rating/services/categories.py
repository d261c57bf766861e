"""Category detection from product name and category text."""

from health_rating.domain.rating import CategoryProfile
from health_rating.domain.rules import CATEGORY_PROFILES


def detect_category(
    name: str | None,
    category: str | None,
    profiles: tuple[CategoryProfile, ...] = CATEGORY_PROFILES,
) -> CategoryProfile | None:
    """Return the effective category profile for a product, if any matches."""
    text = f"{name or ''} {category or ''}".lower()
    matched = [
        profile
        for profile in profiles
        if any(keyword in text for keyword in profile.keywords)
    ]
    if not matched:
        return None
    if len(matched) == 1:
        return matched[0]
    return combine_profiles(matched)


def combine_profiles(profiles: list[CategoryProfile]) -> CategoryProfile:
    """Merge several matched profiles into one that is at least as strict as each."""
    focus: list[str] = []
    multipliers: dict[str, float] = {}
    for profile in profiles:
        for nutrient in profile.nutritional_focus:
            if nutrient not in focus:
                focus.append(nutrient)
        for key, value in profile.nutrient_multipliers.items():
            current = multipliers.get(key)
            multipliers[key] = value if current is None else _more_extreme(current, value)

    adjustment = sum(profile.score_adjustment for profile in profiles) / len(profiles)
    return CategoryProfile(
        category=", ".join(profile.category for profile in profiles),
        keywords=tuple(keyword for profile in profiles for keyword in profile.keywords),
        nutritional_focus=tuple(focus),
        score_adjustment=adjustment,
        nutrient_multipliers=multipliers,
    )


def _more_extreme(current: float, candidate: float) -> float:
    # A multiplier only moves further from 1.0 in its own direction.
    if current > 1:
        return candidate if candidate > current else current
    if current < 1:
        return candidate if candidate < current else current
    return candidate
