"""Error taxonomy of the relay.

Only ValidationError and ControllerUnavailable (plus DeliveryFailed for
commands) cross the boundary to an external caller. StoreError and
per-subscriber delivery failures stay inside the relay and show up in logs
and stats only.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class RelayError(Exception):
    """Base class for relay errors."""


class ValidationError(RelayError):
    """Inbound telemetry payload is malformed or incomplete."""

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []

    def to_reply(self) -> Dict[str, Any]:
        """Error acknowledgment sent back to the originating connection."""
        return {
            "status": "error",
            "message": self.message,
            "details": self.details,
        }


class StoreError(RelayError):
    """Persistence backend failure."""


class ControllerUnavailable(RelayError):
    """No controller link is registered."""

    def __init__(self, message: str = "device not connected"):
        super().__init__(message)


class DeliveryFailed(RelayError):
    """The transport rejected a send."""


class UnknownRole(RelayError):
    """Connect-time discriminator did not match any role."""

    def __init__(self, path: str):
        super().__init__(f"Unknown connection path: {path!r}")
        self.path = path
