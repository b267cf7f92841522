"""Supabase Auth identity provider."""

import logging
from dataclasses import dataclass, field
from uuid import UUID

import httpx
from supabase import Client
from supabase_auth.errors import AuthError

from pantry_keeper.domain.errors import GatewayFailure
from pantry_keeper.services.identity import IdentityProvider

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Resolves the user behind a Supabase access token.

    The token is checked against Supabase Auth at most once per provider;
    providers are built per request, so the cached id never outlives it.
    """

    client: Client
    access_token: str | None
    _resolved: bool = field(default=False, init=False, repr=False)
    _user_id: UUID | None = field(default=None, init=False, repr=False)

    def current_user_id(self) -> UUID | None:
        """Return the token's user id, or None if the token is rejected."""
        if not self._resolved:
            self._user_id = self._resolve()
            self._resolved = True
        return self._user_id

    def _resolve(self) -> UUID | None:
        if not self.access_token:
            return None
        try:
            response = self.client.auth.get_user(self.access_token)
        except AuthError as exc:
            _logger.warning("Access token rejected: %s", exc)
            return None
        except httpx.HTTPError as exc:
            raise GatewayFailure(f"Auth lookup failed: {exc}") from exc
        if response is None or response.user is None:
            return None
        return UUID(response.user.id)
