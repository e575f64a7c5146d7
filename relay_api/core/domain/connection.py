"""Conexiones registradas en el relay y sus roles."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol


class Role(str, Enum):
    """Role fixed at registration time."""
    TANK_SUBSCRIBER = "tank_subscriber"
    ADMIN_SUBSCRIBER = "admin_subscriber"
    CONTROLLER = "controller"


class SendHandle(Protocol):
    """Capability to push one text message to a remote peer.

    The relay never owns the socket; it only asks the handle to send and
    looks at the outcome.
    """

    async def send(self, message: str) -> bool:
        """Send ``message``. Returns False if the peer is gone or the send failed."""
        ...


@dataclass(frozen=True, eq=False)
class Connection:
    """Registry entry for one live duplex connection.

    Equality is identity: two registrations of the same socket are two
    different connections, which is what lets an orphaned controller's close
    event leave a newer controller in place. ``connection_id`` is a short
    label for logs only; it is not unique and plays no part in identity.
    """

    role: Role
    handle: SendHandle
    tank_id: Optional[str] = None
    connection_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    def __repr__(self) -> str:
        if self.tank_id is not None:
            return f"Connection({self.role.value}, tank_id={self.tank_id!r}, id={self.connection_id})"
        return f"Connection({self.role.value}, id={self.connection_id})"


# Handle returned by the registry on registration and handed back to unregister.
SubscriptionHandle = Connection
