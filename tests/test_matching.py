"""Tests for ingredient matching."""

import pytest

from pantry_keeper.domain.recipes import Ingredient
from pantry_keeper.domain.recommendations import UrgencyTier
from pantry_keeper.services.matching import (
    expiring_soon,
    match_ingredients,
    normalize_name,
    urgency_tier,
)
from tests.conftest import TODAY, make_item


def test_normalize_name_trims_and_lowercases() -> None:
    assert normalize_name("  Whole MILK ") == "whole milk"


def test_match_ignores_case_and_whitespace() -> None:
    milk = make_item("milk", days_left=10)

    results = match_ingredients([Ingredient(name=" Milk ")], [milk], today=TODAY)

    assert results[0].stock_item == milk
    assert results[0].matched


def test_match_does_not_accept_partial_names() -> None:
    results = match_ingredients(
        [Ingredient(name="Milk")], [make_item("Milks", days_left=10)], today=TODAY
    )

    assert results[0].stock_item is None
    assert results[0].urgency_tier is UrgencyTier.NONE


def test_match_uses_first_stock_item_with_equal_name() -> None:
    first = make_item("egg", days_left=9)
    second = make_item("EGG", days_left=1)

    results = match_ingredients([Ingredient(name="Egg")], [first, second], today=TODAY)

    assert results[0].stock_item == first
    assert results[0].urgency_tier is UrgencyTier.NONE


def test_match_returns_one_result_per_ingredient_in_order() -> None:
    ingredients = [Ingredient(name="Onion"), Ingredient(name="Egg")]

    results = match_ingredients(ingredients, [make_item("egg", 2)], today=TODAY)

    assert [result.ingredient.name for result in results] == ["Onion", "Egg"]
    assert [result.matched for result in results] == [False, True]


@pytest.mark.parametrize(
    ("days", "tier"),
    [
        (-1, UrgencyTier.EXPIRED),
        (0, UrgencyTier.CRITICAL),
        (3, UrgencyTier.CRITICAL),
        (4, UrgencyTier.SOON),
        (7, UrgencyTier.SOON),
        (8, UrgencyTier.NONE),
    ],
)
def test_urgency_tier_boundaries(days: int, tier: UrgencyTier) -> None:
    assert urgency_tier(days) is tier


def test_expiring_soon_lists_unexpired_items_within_a_week() -> None:
    stock = [
        make_item("tofu", 6),
        make_item("cream", -2),
        make_item("spinach", 1),
        make_item("rice", 30),
        make_item("kimchi", 7),
    ]

    upcoming = expiring_soon(stock, today=TODAY)

    assert [item.name for item in upcoming] == ["spinach", "tofu", "kimchi"]
