from __future__ import annotations

import logging

from .domain.reading import Command
from .registry import ConnectionRegistry
from .validation.codec import encode_command
from ..errors import ControllerUnavailable, DeliveryFailed

logger = logging.getLogger(__name__)


class CommandRelay:
    """Routes administrator commands to the single controller link."""

    def __init__(self, registry: ConnectionRegistry):
        self._registry = registry

    async def relay(self, command: Command) -> None:
        """Send ``command`` to the current controller.

        Raises:
            ControllerUnavailable: no controller registered; nothing is sent
            DeliveryFailed: the controller's transport rejected the send
        """
        handle = self._registry.current_controller()
        if handle is None:
            logger.warning("[COMMAND] No controller connected: action=%s tank_id=%s", command.action, command.tank_id)
            raise ControllerUnavailable()

        try:
            delivered = await handle.send(encode_command(command))
        except Exception as e:
            raise DeliveryFailed(f"Command delivery failed: {type(e).__name__}") from e

        if not delivered:
            raise DeliveryFailed("Command delivery failed: controller link not open")

        logger.info("[COMMAND] Relayed action=%s tank_id=%s refill=%s", command.action, command.tank_id, command.refill)
