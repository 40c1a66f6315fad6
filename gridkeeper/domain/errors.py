from __future__ import annotations


class GridkeeperError(Exception):
    """Base class for all domain/service errors."""


# -------------------------
# Generic / input
# -------------------------

class ValidationError(GridkeeperError):
    """Input or state failed validation."""


class InvalidCategory(ValidationError):
    """Leaderboard category token/value is not one of the known categories."""


# -------------------------
# Collaborators
# -------------------------

class StoreUnavailable(GridkeeperError):
    """The statistics store could not be read."""


class IdentityResolutionFailure(GridkeeperError):
    """A single user's display identity could not be resolved."""

    def __init__(self, user_id: str, reason: str = "") -> None:
        self.user_id = user_id
        self.reason = reason
        super().__init__(f"Could not resolve user {user_id}" + (f": {reason}" if reason else ""))

