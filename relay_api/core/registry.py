"""Registro de conexiones por rol.

Owns the three membership structures of the relay:

- tank subscribers, keyed by tank id
- admin subscribers
- the single controller link

Each structure has its own lock; every read and write of a structure happens
under that lock, and snapshots handed to the fan-out are copies so delivery
never iterates a live structure.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from .domain.connection import Connection, Role, SendHandle
from ..errors import UnknownRole

logger = logging.getLogger(__name__)

TANKS_PREFIX = "tanks/"
ADMIN_PATH = "admin"
CONTROLLER_PATH = "iot"


@dataclass(frozen=True)
class RoleRoute:
    """Role (and tank id for subscribers) resolved from a connect path."""
    role: Role
    tank_id: Optional[str] = None


def resolve_role(path: str) -> RoleRoute:
    """Map a connect-time path to a role.

    ``/tanks/{tank_id}`` -> tank subscriber, ``/admin`` -> admin subscriber,
    ``/iot`` -> controller link.

    Raises:
        UnknownRole: for anything else, including ``/tanks/`` with no id.
    """
    normalized = path.lstrip("/")

    if normalized.startswith(TANKS_PREFIX):
        tank_id = normalized[len(TANKS_PREFIX):]
        if tank_id:
            return RoleRoute(Role.TANK_SUBSCRIBER, tank_id)
    elif normalized == ADMIN_PATH:
        return RoleRoute(Role.ADMIN_SUBSCRIBER)
    elif normalized == CONTROLLER_PATH:
        return RoleRoute(Role.CONTROLLER)

    raise UnknownRole(path)


class ConnectionRegistry:
    """Registro en memoria de conexiones vivas, seguro ante concurrencia.

    Uso:
        registry = ConnectionRegistry()
        conn = registry.register_tank_subscriber("T1", handle)
        ...
        registry.unregister(conn)  # on transport close, safe to repeat
    """

    def __init__(self) -> None:
        self._tank_subscribers: Dict[str, List[Connection]] = {}
        self._tank_lock = threading.Lock()

        self._admin_subscribers: List[Connection] = []
        self._admin_lock = threading.Lock()

        self._controller: Optional[Connection] = None
        self._controller_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, route: RoleRoute, handle: SendHandle) -> Connection:
        """Register ``handle`` under the role resolved by ``resolve_role``."""
        if route.role is Role.TANK_SUBSCRIBER:
            return self.register_tank_subscriber(route.tank_id, handle)
        if route.role is Role.ADMIN_SUBSCRIBER:
            return self.register_admin_subscriber(handle)
        return self.register_controller(handle)

    def register_tank_subscriber(self, tank_id: str, handle: SendHandle) -> Connection:
        if not tank_id:
            raise ValueError("tank_id is required")

        conn = Connection(role=Role.TANK_SUBSCRIBER, handle=handle, tank_id=tank_id)
        with self._tank_lock:
            self._tank_subscribers.setdefault(tank_id, []).append(conn)
            count = len(self._tank_subscribers[tank_id])

        logger.info("[REGISTRY] Tank subscriber registered: %r (tank subscribers=%d)", conn, count)
        return conn

    def register_admin_subscriber(self, handle: SendHandle) -> Connection:
        conn = Connection(role=Role.ADMIN_SUBSCRIBER, handle=handle)
        with self._admin_lock:
            self._admin_subscribers.append(conn)
            count = len(self._admin_subscribers)

        logger.info("[REGISTRY] Admin subscriber registered: %r (admins=%d)", conn, count)
        return conn

    def register_controller(self, handle: SendHandle) -> Connection:
        """Register the controller link. Last writer wins.

        The replaced link stays orphaned until its own close event, which
        will not touch the new registration (see ``unregister``).
        """
        conn = Connection(role=Role.CONTROLLER, handle=handle)
        with self._controller_lock:
            previous = self._controller
            self._controller = conn

        if previous is not None:
            logger.warning("[REGISTRY] Controller %r replaced by %r", previous, conn)
        else:
            logger.info("[REGISTRY] Controller registered: %r", conn)
        return conn

    def unregister(self, conn: Connection) -> bool:
        """Remove ``conn`` from whichever structure holds it.

        Idempotent: removing a connection that is already gone is a no-op.

        Returns:
            True si la conexión se eliminó en esta llamada
        """
        if conn.role is Role.TANK_SUBSCRIBER:
            removed = self._remove_tank_subscriber(conn)
        elif conn.role is Role.ADMIN_SUBSCRIBER:
            removed = self._remove_admin_subscriber(conn)
        else:
            removed = self._remove_controller(conn)

        if removed:
            logger.info("[REGISTRY] Unregistered %r", conn)
        else:
            logger.debug("[REGISTRY] Unregister no-op for %r", conn)
        return removed

    def _remove_tank_subscriber(self, conn: Connection) -> bool:
        with self._tank_lock:
            subscribers = self._tank_subscribers.get(conn.tank_id)
            if not subscribers or conn not in subscribers:
                return False
            subscribers.remove(conn)
            if not subscribers:
                del self._tank_subscribers[conn.tank_id]
            return True

    def _remove_admin_subscriber(self, conn: Connection) -> bool:
        with self._admin_lock:
            if conn not in self._admin_subscribers:
                return False
            self._admin_subscribers.remove(conn)
            return True

    def _remove_controller(self, conn: Connection) -> bool:
        with self._controller_lock:
            # An orphaned controller must not clear its replacement.
            if self._controller is not conn:
                return False
            self._controller = None
            return True

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot_tank_subscribers(self, tank_id: str) -> List[SendHandle]:
        """Point-in-time copy of the send handles subscribed to ``tank_id``."""
        with self._tank_lock:
            return [c.handle for c in self._tank_subscribers.get(tank_id, ())]

    def snapshot_admin_subscribers(self) -> List[SendHandle]:
        """Point-in-time copy of the admin send handles."""
        with self._admin_lock:
            return [c.handle for c in self._admin_subscribers]

    def current_controller(self) -> Optional[SendHandle]:
        with self._controller_lock:
            return self._controller.handle if self._controller is not None else None

    def counts(self) -> dict:
        """Conteos para el endpoint de estadísticas."""
        with self._tank_lock:
            tanks = len(self._tank_subscribers)
            tank_subscribers = sum(len(v) for v in self._tank_subscribers.values())
        with self._admin_lock:
            admins = len(self._admin_subscribers)
        with self._controller_lock:
            controller_connected = self._controller is not None

        return {
            "tanks": tanks,
            "tank_subscribers": tank_subscribers,
            "admin_subscribers": admins,
            "controller_connected": controller_connected,
        }
