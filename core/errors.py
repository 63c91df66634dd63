# Domain errors raised by the marketplace services.
# Routers let these propagate; server.py turns them into JSON failure responses.

from typing import Any, Optional


class MarketplaceError(Exception):
    """Base class for expected, recoverable business failures."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {
            "success": False,
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(MarketplaceError):
    """Malformed or missing input, bad enum value, bad timeline ordering."""
    status_code = 400


class NotFoundError(MarketplaceError):
    """Referenced campaign, chat, profile or user does not exist."""
    status_code = 404


class AuthorizationError(MarketplaceError):
    """Actor is not a participant/owner, or has the wrong role."""
    status_code = 403


class PolicyError(MarketplaceError):
    """Business rule violation: subscription, deadline, campaign not open, profile not approved."""
    status_code = 403


class ConflictError(PolicyError):
    """The record already exists (duplicate application, second profile)."""
    status_code = 409


class StateError(MarketplaceError):
    """Operation is not valid for the current lifecycle state."""
    status_code = 409
