"""Ingredient matching against inventory stock."""

from collections.abc import Iterable, Sequence
from datetime import date

from pantry_keeper.domain.inventory import InventoryItem
from pantry_keeper.domain.recipes import Ingredient
from pantry_keeper.domain.recommendations import MatchResult, UrgencyTier

CRITICAL_MAX_DAYS = 3
SOON_MAX_DAYS = 7


def normalize_name(name: str) -> str:
    """Return the join key for ingredient and stock names."""
    return name.strip().lower()


def days_until_expiry(item: InventoryItem, today: date) -> int:
    """Return calendar days between today and the item's expiry date."""
    return (item.expiry_date - today).days


def urgency_tier(days: int) -> UrgencyTier:
    """Bucket days until expiry into an urgency tier."""
    if days < 0:
        return UrgencyTier.EXPIRED
    if days <= CRITICAL_MAX_DAYS:
        return UrgencyTier.CRITICAL
    if days <= SOON_MAX_DAYS:
        return UrgencyTier.SOON
    return UrgencyTier.NONE


def match_ingredients(
    ingredients: Iterable[Ingredient],
    stock: Sequence[InventoryItem],
    today: date | None = None,
) -> list[MatchResult]:
    """Match each ingredient to the first stock item with an equal name.

    Names are compared after trimming and lowercasing; there is no partial
    or fuzzy matching.
    """
    resolved_today = today or date.today()
    index: dict[str, InventoryItem] = {}
    for item in stock:
        index.setdefault(normalize_name(item.name), item)

    results: list[MatchResult] = []
    for ingredient in ingredients:
        stock_item = index.get(normalize_name(ingredient.name))
        tier = (
            urgency_tier(days_until_expiry(stock_item, resolved_today))
            if stock_item is not None
            else UrgencyTier.NONE
        )
        results.append(
            MatchResult(ingredient=ingredient, stock_item=stock_item, urgency_tier=tier)
        )
    return results


def expiring_soon(
    stock: Iterable[InventoryItem], today: date | None = None
) -> list[InventoryItem]:
    """Return unexpired items due within a week, soonest first."""
    resolved_today = today or date.today()
    upcoming = [
        item
        for item in stock
        if 0 <= days_until_expiry(item, resolved_today) <= SOON_MAX_DAYS
    ]
    return sorted(upcoming, key=lambda item: item.expiry_date)
