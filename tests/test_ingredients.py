"""Tests for ingredient parsing and analysis."""

import pytest

from health_rating.services.ingredients import analyze_ingredients, parse_ingredients


def test_parse_ingredients_splits_and_trims() -> None:
    assert parse_ingredients("Water, sugar , ,salt") == ["Water", "sugar", "salt"]
    assert parse_ingredients([" oats ", ""]) == ["oats"]
    assert parse_ingredients(None) == []
    assert parse_ingredients("") == []


def test_earlier_ingredients_weigh_more() -> None:
    contribution = analyze_ingredients(["Sugar", "Whole grain oats", "Salt"])

    assert contribution.score == pytest.approx(3.0 - 0.3 + 0.3 * (2 / 3))
    assert contribution.analysis == (
        "1. Sugar: Added sugar",
        "2. Whole grain oats: Whole food ingredient",
    )


def test_position_weight_halves_second_of_two() -> None:
    contribution = analyze_ingredients(["Water", "Sugar"])

    assert contribution.score == pytest.approx(3.0 - 0.3 * 0.5)
    assert contribution.analysis == ("2. Sugar: Added sugar",)


def test_alias_matches_indirect_names() -> None:
    contribution = analyze_ingredients(["Cane juice"])

    assert contribution.score == pytest.approx(2.7)
    assert contribution.analysis == ("1. Cane juice: Added sugar",)


def test_ingredient_can_match_several_rules() -> None:
    contribution = analyze_ingredients(["Organic whole grain fiber"])

    note = " (organic: no synthetic pesticides)"
    assert contribution.score == pytest.approx(3.0 + 0.3 + 0.4 + 0.2)
    assert contribution.analysis == (
        f"1. Organic whole grain fiber: Whole food ingredient{note}",
        f"1. Organic whole grain fiber: Adds beneficial nutrients{note}",
        f"1. Organic whole grain fiber: Natural ingredient{note}",
    )


def test_processing_method_is_appended_to_reason() -> None:
    contribution = analyze_ingredients(["Roasted almonds"])

    assert contribution.analysis == (
        "1. Roasted almonds: Source of healthy fats (roasted: some vitamin loss)",
    )


def test_unmatched_ingredients_leave_neutral_score() -> None:
    contribution = analyze_ingredients(["Water", "Salt"])

    assert contribution.score == 3.0
    assert contribution.analysis == ()


def test_parse_ingredients_skips_missing_entries() -> None:
    assert parse_ingredients(["Sugar", None, "Salt"]) == ["Sugar", "Salt"]


def test_missing_entries_do_not_dilute_position_weights() -> None:
    contribution = analyze_ingredients(parse_ingredients([None, "Sugar"]))

    assert contribution.score == pytest.approx(2.7)
    assert contribution.analysis == ("1. Sugar: Added sugar",)
