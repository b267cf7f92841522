"""Domain models for ingredient matching and recommendations."""

from dataclasses import dataclass
from enum import StrEnum

from pantry_keeper.domain.inventory import InventoryItem
from pantry_keeper.domain.recipes import Ingredient, Recipe


class UrgencyTier(StrEnum):
    """Coarse freshness bucket derived from days until expiry."""

    EXPIRED = "EXPIRED"
    CRITICAL = "CRITICAL"
    SOON = "SOON"
    NONE = "NONE"


class SelectionMode(StrEnum):
    """How the final recommendation list is cut from the ranked candidates."""

    RANKED = "ranked"
    VARIETY = "variety"


@dataclass(frozen=True)
class MatchResult:
    """Match status of one recipe ingredient against stock."""

    ingredient: Ingredient
    stock_item: InventoryItem | None
    urgency_tier: UrgencyTier

    @property
    def matched(self) -> bool:
        return self.stock_item is not None


@dataclass(frozen=True)
class RankedRecipe:
    """Recommendation candidate with its score."""

    recipe: Recipe
    score: int
    matches: tuple[MatchResult, ...]
    reasons: tuple[str, ...]
