"""Expiry-weighted recipe recommendations."""

import random
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from pantry_keeper.domain.inventory import InventoryItem
from pantry_keeper.domain.recipes import Recipe
from pantry_keeper.domain.recommendations import (
    MatchResult,
    RankedRecipe,
    SelectionMode,
    UrgencyTier,
)
from pantry_keeper.services.matching import match_ingredients, normalize_name

MATCH_POINTS = 1
TIER_BONUS = {
    UrgencyTier.CRITICAL: 20,
    UrgencyTier.SOON: 10,
}
PINNED_BONUS = 1000


def score_matches(matches: Sequence[MatchResult]) -> int:
    """Return the availability and freshness score of a match list."""
    score = 0
    for match in matches:
        if not match.matched:
            continue
        score += MATCH_POINTS + TIER_BONUS.get(match.urgency_tier, 0)
    return score


def contains_ingredient(recipe: Recipe, name: str) -> bool:
    """Return True if the recipe's current version lists the ingredient."""
    current = recipe.current_version
    if current is None:
        return False
    key = normalize_name(name)
    return any(normalize_name(ing.name) == key for ing in current.ingredients)


def rank_recipes(
    recipes: Sequence[Recipe],
    stock: Sequence[InventoryItem],
    pinned_ingredient_name: str | None = None,
    today: date | None = None,
) -> list[RankedRecipe]:
    """Score, filter and sort recipes; ties keep input order."""
    candidates: list[RankedRecipe] = []
    for recipe in recipes:
        current = recipe.current_version
        matches = (
            match_ingredients(current.ingredients, stock, today) if current else []
        )
        score = score_matches(matches)
        if pinned_ingredient_name:
            if not contains_ingredient(recipe, pinned_ingredient_name):
                continue
            score += PINNED_BONUS
        elif score == 0:
            continue
        reasons = tuple(
            dict.fromkeys(
                match.ingredient.name
                for match in matches
                if match.urgency_tier in TIER_BONUS
            )
        )
        candidates.append(
            RankedRecipe(
                recipe=recipe,
                score=score,
                matches=tuple(matches),
                reasons=reasons,
            )
        )
    return sorted(candidates, key=lambda candidate: candidate.score, reverse=True)


@dataclass
class RecommendationService:
    """Cuts ranked candidates down to the requested number of recipes.

    ``VARIETY`` mode draws a random subset of the best-scored pool; pass a
    seeded ``rng`` to make the draw reproducible.
    """

    mode: SelectionMode = SelectionMode.RANKED
    pool_size: int = 5
    max_picks: int = 2
    rng: random.Random = field(default_factory=random.Random)

    def recommend(
        self,
        recipes: Sequence[Recipe],
        stock: Sequence[InventoryItem],
        pinned_ingredient_name: str | None = None,
        top_n: int = 3,
        today: date | None = None,
    ) -> list[RankedRecipe]:
        """Return up to ``top_n`` recommended recipes, best first."""
        if top_n <= 0:
            return []
        ranked = rank_recipes(recipes, stock, pinned_ingredient_name, today)
        if self.mode is SelectionMode.RANKED:
            return ranked[:top_n]
        return self._pick_variety(ranked, top_n)

    def _pick_variety(
        self, ranked: list[RankedRecipe], top_n: int
    ) -> list[RankedRecipe]:
        pool = ranked[: self.pool_size]
        if len(pool) <= top_n:
            return ranked[:top_n]
        count = self.rng.randint(1, max(1, min(self.max_picks, top_n)))
        chosen = set(self.rng.sample(range(len(pool)), count))
        return [candidate for idx, candidate in enumerate(pool) if idx in chosen]
