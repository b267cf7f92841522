"""FastAPI application factory."""

import logging
from uuid import UUID

from fastapi import Depends, FastAPI, Header, Request, status
from fastapi.responses import JSONResponse

from pantry_keeper.api.schemas import (
    CommentCreate,
    InventoryCreate,
    InventoryUpdate,
    PrimaryVersion,
    PublishRequest,
    RecipeCreate,
    RecipeDetailsUpdate,
    SnapshotUpdate,
    VersionPayload,
)
from pantry_keeper.app_logging import configure_logging
from pantry_keeper.containers import AppContainer, UserServices
from pantry_keeper.domain.community import Comment, CommunitySnapshot
from pantry_keeper.domain.errors import (
    ConflictError,
    GatewayFailure,
    InvariantViolation,
    NotFound,
    PantryKeeperError,
    Unauthenticated,
)
from pantry_keeper.domain.inventory import InventoryItem
from pantry_keeper.domain.recipes import Ingredient, Recipe, RecipeVersion
from pantry_keeper.domain.recommendations import RankedRecipe
from pantry_keeper.services.recipes import display_versions, suggest_next_label

_STATUS_BY_ERROR: list[tuple[type[PantryKeeperError], int]] = [
    (NotFound, status.HTTP_404_NOT_FOUND),
    (InvariantViolation, status.HTTP_409_CONFLICT),
    (Unauthenticated, status.HTTP_401_UNAUTHORIZED),
    (ConflictError, status.HTTP_409_CONFLICT),
    (GatewayFailure, status.HTTP_502_BAD_GATEWAY),
]


def get_services(
    request: Request, authorization: str | None = Header(default=None)
) -> UserServices:
    """Bind services to the identity carried by the bearer token."""
    container: AppContainer = request.app.state.container
    identity = container.identity_factory(_bearer_token(authorization))
    return container.services_for(identity)


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    app = FastAPI()
    app.state.container = container

    @app.exception_handler(PantryKeeperError)
    async def handle_domain_error(
        request: Request, exc: PantryKeeperError
    ) -> JSONResponse:
        if isinstance(exc, GatewayFailure):
            logger.error("Gateway failure on %s", request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=_status_for(exc),
            content={"error": exc.label, "message": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/recipes")
    async def list_recipes(
        origin: str | None = None,
        q: str | None = None,
        services: UserServices = Depends(get_services),
    ) -> dict[str, object]:
        """Reload and list the caller's recipes."""
        services.recipes.load_recipes()
        recipes = services.recipes.list_recipes(origin=origin, query=q)
        return {"recipes": [_serialize_recipe(recipe) for recipe in recipes]}

    @app.post("/recipes", status_code=status.HTTP_201_CREATED)
    async def create_recipe(
        body: RecipeCreate, services: UserServices = Depends(get_services)
    ) -> dict[str, object]:
        recipe = services.recipes.create_recipe(body.title, body.description)
        return _serialize_recipe(recipe)

    @app.get("/recipes/{recipe_id}")
    async def get_recipe(
        recipe_id: UUID, services: UserServices = Depends(get_services)
    ) -> dict[str, object]:
        return _serialize_recipe(services.recipes.get_recipe(recipe_id))

    @app.patch("/recipes/{recipe_id}")
    async def update_recipe(
        recipe_id: UUID,
        body: RecipeDetailsUpdate,
        services: UserServices = Depends(get_services),
    ) -> dict[str, object]:
        recipe = services.recipes.update_details(
            recipe_id, title=body.title, description=body.description
        )
        return _serialize_recipe(recipe)

    @app.delete("/recipes/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_recipe(
        recipe_id: UUID, services: UserServices = Depends(get_services)
    ) -> None:
        services.recipes.delete_recipe(recipe_id)

    @app.post("/recipes/{recipe_id}/versions", status_code=status.HTTP_201_CREATED)
    async def append_version(
        recipe_id: UUID,
        body: VersionPayload,
        services: UserServices = Depends(get_services),
    ) -> dict[str, object]:
        recipe = services.recipes.append_version(recipe_id, body.to_domain())
        return _serialize_recipe(recipe)

    @app.put("/recipes/{recipe_id}/versions/{index}")
    async def edit_version(
        recipe_id: UUID,
        index: int,
        body: VersionPayload,
        services: UserServices = Depends(get_services),
    ) -> dict[str, object]:
        recipe = services.recipes.edit_version(recipe_id, index, body.to_domain())
        return _serialize_recipe(recipe)

    @app.delete("/recipes/{recipe_id}/versions/{index}")
    async def delete_version(
        recipe_id: UUID, index: int, services: UserServices = Depends(get_services)
    ) -> dict[str, object]:
        return _serialize_recipe(services.recipes.delete_version(recipe_id, index))

    @app.post("/recipes/{recipe_id}/primary")
    async def set_primary(
        recipe_id: UUID,
        body: PrimaryVersion,
        services: UserServices = Depends(get_services),
    ) -> dict[str, object]:
        return _serialize_recipe(services.recipes.set_primary(recipe_id, body.label))

    @app.get("/inventory")
    async def list_inventory(
        services: UserServices = Depends(get_services),
    ) -> dict[str, object]:
        items = services.inventory.list_items()
        return {"items": [_serialize_item(item) for item in items]}

    @app.get("/inventory/expiring")
    async def expiring_inventory(
        services: UserServices = Depends(get_services),
    ) -> dict[str, object]:
        items = services.inventory.expiring_soon()
        return {"items": [_serialize_item(item) for item in items]}

    @app.post("/inventory", status_code=status.HTTP_201_CREATED)
    async def add_inventory_item(
        body: InventoryCreate, services: UserServices = Depends(get_services)
    ) -> dict[str, object]:
        item = services.inventory.add_item(
            name=body.name,
            expiry_date=body.expiry_date,
            storage_location=body.storage_location,
            quantity_text=body.quantity,
            detail=body.detail,
            barcode=body.barcode,
        )
        return _serialize_item(item)

    @app.patch("/inventory/{item_id}")
    async def update_inventory_item(
        item_id: UUID,
        body: InventoryUpdate,
        services: UserServices = Depends(get_services),
    ) -> dict[str, object]:
        updates = {
            key: value
            for key, value in body.model_dump(exclude_unset=True).items()
            if value is not None or key in {"detail", "barcode"}
        }
        if "quantity" in updates:
            updates["quantity_text"] = updates.pop("quantity")
        item = services.inventory.update_item(item_id, updates)
        return _serialize_item(item)

    @app.delete("/inventory/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_inventory_item(
        item_id: UUID, services: UserServices = Depends(get_services)
    ) -> None:
        services.inventory.delete_item(item_id)

    @app.get("/recommendations")
    async def recommendations(
        request: Request,
        pinned: str | None = None,
        top_n: int | None = None,
        services: UserServices = Depends(get_services),
    ) -> dict[str, object]:
        """Recompute recommendations from fresh recipes and stock."""
        state_container: AppContainer = request.app.state.container
        recipes = services.recipes.load_recipes()
        stock = services.inventory.list_items()
        ranked = state_container.recommendation_service.recommend(
            recipes,
            stock,
            pinned_ingredient_name=pinned or None,
            top_n=(
                top_n
                if top_n is not None
                else state_container.settings.recommendation_top_n
            ),
        )
        return {"recommendations": [_serialize_ranked(item) for item in ranked]}

    @app.get("/community")
    async def list_community(
        q: str | None = None,
        author_id: UUID | None = None,
        services: UserServices = Depends(get_services),
    ) -> dict[str, object]:
        if author_id is not None:
            snapshots = services.community.list_by_author(author_id)
        else:
            snapshots = services.community.list_snapshots(q)
        return {"recipes": [_serialize_snapshot(snapshot) for snapshot in snapshots]}

    @app.post("/community", status_code=status.HTTP_201_CREATED)
    async def publish(
        body: PublishRequest, services: UserServices = Depends(get_services)
    ) -> dict[str, object]:
        recipe = services.recipes.get_recipe(body.recipe_id)
        version = None
        if body.version_index is not None:
            if not 0 <= body.version_index < len(recipe.versions):
                raise InvariantViolation(
                    f"Version index {body.version_index} is out of range"
                )
            version = recipe.versions[body.version_index]
        snapshot = services.community.publish(
            recipe,
            version,
            title=body.title,
            description=body.description,
            author_label=body.author_label,
        )
        return _serialize_snapshot(snapshot)

    @app.get("/community/{snapshot_id}")
    async def get_snapshot(
        snapshot_id: UUID, services: UserServices = Depends(get_services)
    ) -> dict[str, object]:
        return _serialize_snapshot(services.community.get_snapshot(snapshot_id))

    @app.patch("/community/{snapshot_id}")
    async def edit_snapshot(
        snapshot_id: UUID,
        body: SnapshotUpdate,
        services: UserServices = Depends(get_services),
    ) -> dict[str, object]:
        updates = {
            key: value
            for key, value in body.model_dump(exclude_unset=True).items()
            if value is not None
        }
        if body.ingredients is not None:
            updates["ingredients"] = [ing.to_domain() for ing in body.ingredients]
        snapshot = services.community.edit_snapshot(snapshot_id, updates)
        return _serialize_snapshot(snapshot)

    @app.delete("/community/{snapshot_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_snapshot(
        snapshot_id: UUID, services: UserServices = Depends(get_services)
    ) -> None:
        services.community.delete_snapshot(snapshot_id)

    @app.post("/community/{snapshot_id}/import", status_code=status.HTTP_201_CREATED)
    async def import_snapshot(
        snapshot_id: UUID, services: UserServices = Depends(get_services)
    ) -> dict[str, object]:
        snapshot = services.community.get_snapshot(snapshot_id)
        recipe = services.community.import_snapshot(snapshot)
        return _serialize_recipe(recipe)

    @app.post("/community/{snapshot_id}/like")
    async def toggle_like(
        snapshot_id: UUID, services: UserServices = Depends(get_services)
    ) -> dict[str, object]:
        liked = services.community.toggle_like(snapshot_id)
        snapshot = services.community.get_snapshot(snapshot_id)
        return {"liked": liked, "likes_count": snapshot.like_count}

    @app.post("/community/{snapshot_id}/view")
    async def record_view(
        snapshot_id: UUID, services: UserServices = Depends(get_services)
    ) -> dict[str, int]:
        return {"views_count": services.community.increment_views(snapshot_id)}

    @app.get("/community/{snapshot_id}/comments")
    async def list_comments(
        snapshot_id: UUID, services: UserServices = Depends(get_services)
    ) -> dict[str, object]:
        comments = services.community.list_comments(snapshot_id)
        return {"comments": [_serialize_comment(comment) for comment in comments]}

    @app.post(
        "/community/{snapshot_id}/comments", status_code=status.HTTP_201_CREATED
    )
    async def add_comment(
        snapshot_id: UUID,
        body: CommentCreate,
        services: UserServices = Depends(get_services),
    ) -> dict[str, object]:
        comment = services.community.add_comment(
            snapshot_id, body.content, parent_id=body.parent_id
        )
        return _serialize_comment(comment)

    return app


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _status_for(exc: PantryKeeperError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _serialize_ingredient(ingredient: Ingredient) -> dict[str, object]:
    return {
        "name": ingredient.name,
        "amount": ingredient.amount_text,
        "is_required": ingredient.is_required,
    }


def _serialize_version(index: int, version: RecipeVersion) -> dict[str, object]:
    return {
        "index": index,
        "version": version.version_label,
        "ingredients": [_serialize_ingredient(ing) for ing in version.ingredients],
        "steps": list(version.steps),
        "notes": version.change_notes,
        "memo": version.private_memo,
        "created_at": version.created_at.isoformat() if version.created_at else None,
    }


def _serialize_recipe(recipe: Recipe) -> dict[str, object]:
    return {
        "id": str(recipe.id),
        "title": recipe.title,
        "description": recipe.description,
        "current_version": recipe.current_version_label,
        "source_author": recipe.source_author_label,
        "next_version_label": suggest_next_label(recipe),
        "versions": [
            _serialize_version(index, version)
            for index, version in display_versions(recipe)
        ],
    }


def _serialize_item(item: InventoryItem) -> dict[str, object]:
    return {
        "id": str(item.id),
        "name": item.name,
        "detail": item.detail,
        "storage_location": item.storage_location.value,
        "quantity": item.quantity_text,
        "expiry_date": item.expiry_date.isoformat(),
        "registered_at": item.registered_at.isoformat(),
        "barcode": item.barcode,
    }


def _serialize_ranked(ranked: RankedRecipe) -> dict[str, object]:
    return {
        "recipe_id": str(ranked.recipe.id),
        "title": ranked.recipe.title,
        "score": ranked.score,
        "reasons": list(ranked.reasons),
        "matches": [
            {
                "ingredient": match.ingredient.name,
                "stock_item_id": str(match.stock_item.id) if match.stock_item else None,
                "urgency": match.urgency_tier.value,
            }
            for match in ranked.matches
        ],
    }


def _serialize_snapshot(snapshot: CommunitySnapshot) -> dict[str, object]:
    return {
        "id": str(snapshot.id),
        "original_recipe_id": (
            str(snapshot.source_recipe_id) if snapshot.source_recipe_id else None
        ),
        "title": snapshot.title,
        "description": snapshot.description,
        "ingredients": [_serialize_ingredient(ing) for ing in snapshot.ingredients],
        "steps": list(snapshot.steps),
        "author_id": str(snapshot.author_id),
        "author_name": snapshot.author_label,
        "created_at": snapshot.created_at.isoformat(),
        "likes_count": snapshot.like_count,
        "views_count": snapshot.view_count,
    }


def _serialize_comment(comment: Comment) -> dict[str, object]:
    return {
        "id": str(comment.id),
        "parent_id": str(comment.parent_id) if comment.parent_id else None,
        "user_id": str(comment.author_id),
        "content": comment.content,
        "created_at": comment.created_at.isoformat(),
    }
