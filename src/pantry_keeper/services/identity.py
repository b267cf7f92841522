"""Identity seam used to stamp and gate writes."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from pantry_keeper.domain.errors import Unauthenticated


class IdentityProvider(Protocol):
    """Resolves the acting user, if any."""

    def current_user_id(self) -> UUID | None:
        """Return the current user id or None when signed out."""


@dataclass(frozen=True)
class StaticIdentityProvider(IdentityProvider):
    """Identity fixed at construction time."""

    user_id: UUID | None = None

    def current_user_id(self) -> UUID | None:
        return self.user_id


def require_user_id(identity: IdentityProvider) -> UUID:
    """Return the current user id or raise Unauthenticated."""
    user_id = identity.current_user_id()
    if user_id is None:
        raise Unauthenticated("Sign-in required")
    return user_id
