"""Dependency container wiring for the application."""

import random
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import UUID

from supabase import create_client

from pantry_keeper.adapters.supabase_identity import SupabaseIdentityProvider
from pantry_keeper.adapters.supabase_record_store import SupabaseRecordStore
from pantry_keeper.config import Settings, parse_recommendation_mode
from pantry_keeper.domain.recipes import Recipe
from pantry_keeper.services.community import CommunitySnapshotService
from pantry_keeper.services.gateway import RecordStore
from pantry_keeper.services.identity import IdentityProvider
from pantry_keeper.services.inventory import InventoryService
from pantry_keeper.services.recipes import RecipeLineageService
from pantry_keeper.services.recommendations import RecommendationService


@dataclass
class UserServices:
    """Services bound to one acting identity."""

    recipes: RecipeLineageService
    inventory: InventoryService
    community: CommunitySnapshotService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    record_store: RecordStore
    recommendation_service: RecommendationService
    identity_factory: Callable[[str | None], IdentityProvider]
    recipe_cache: dict[UUID, Recipe] = field(default_factory=dict)

    def services_for(self, identity: IdentityProvider) -> UserServices:
        """Build services for an identity, sharing the recipe cache."""
        recipes = RecipeLineageService(
            store=self.record_store, identity=identity, cache=self.recipe_cache
        )
        return UserServices(
            recipes=recipes,
            inventory=InventoryService(store=self.record_store, identity=identity),
            community=CommunitySnapshotService(
                store=self.record_store, identity=identity, recipes=recipes
            ),
        )


def build_recommendation_service(settings: Settings) -> RecommendationService:
    return RecommendationService(
        mode=parse_recommendation_mode(settings.recommendation_mode),
        pool_size=settings.variety_pool_size,
        max_picks=settings.variety_max_picks,
        rng=random.Random(settings.recommendation_seed),
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_key
    )

    def identity_factory(access_token: str | None) -> IdentityProvider:
        return SupabaseIdentityProvider(supabase_client, access_token)

    return AppContainer(
        settings=resolved_settings,
        record_store=SupabaseRecordStore(supabase_client),
        recommendation_service=build_recommendation_service(resolved_settings),
        identity_factory=identity_factory,
    )
