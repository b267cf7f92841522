"""Domain models for versioned recipes."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

INITIAL_VERSION_LABEL = "1.0"


@dataclass(frozen=True)
class Ingredient:
    """An ingredient line inside a recipe version."""

    name: str
    amount_text: str = ""
    is_required: bool = False


@dataclass(frozen=True)
class RecipeVersion:
    """One entry in a recipe's history.

    ``sequence`` is assigned by the lineage manager and orders versions
    internally; ``version_label`` is a free-form display string.
    """

    version_label: str
    ingredients: tuple[Ingredient, ...] = ()
    steps: tuple[str, ...] = ()
    change_notes: str = ""
    private_memo: str | None = None
    created_at: datetime | None = None
    sequence: int = 0


@dataclass(frozen=True)
class Recipe:
    """Recipe aggregate owning its version lineage."""

    id: UUID
    title: str
    description: str
    current_version_label: str
    owner_id: UUID
    versions: tuple[RecipeVersion, ...] = field(default_factory=tuple)
    source_author_label: str | None = None

    @property
    def current_version(self) -> RecipeVersion | None:
        """Return the version the current label points at."""
        for version in self.versions:
            if version.version_label == self.current_version_label:
                return version
        return None

    @property
    def is_imported(self) -> bool:
        return self.source_author_label is not None
