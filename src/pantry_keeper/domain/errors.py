"""Error taxonomy for pantry keeper operations."""


class PantryKeeperError(Exception):
    """Base class for errors surfaced to callers."""

    label = "Error"


class InvariantViolation(PantryKeeperError):
    """Raised when an operation would break a recipe lineage invariant."""

    label = "InvariantViolation"


class NotFound(PantryKeeperError):
    """Raised when a record id does not exist."""

    label = "NotFound"


class Unauthenticated(PantryKeeperError):
    """Raised when a gated operation has no resolvable user id."""

    label = "Unauthenticated"


class GatewayFailure(PantryKeeperError):
    """Raised when the persistence gateway call itself failed."""

    label = "GatewayFailure"


class ConflictError(GatewayFailure):
    """Raised when an insert collides with an existing record id."""

    label = "ConflictError"
