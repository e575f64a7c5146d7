"""Command submission: pushes an administrator command to the controller link."""

from fastapi import APIRouter, Depends, HTTPException

from ..core.domain.reading import Command
from ..errors import ControllerUnavailable, DeliveryFailed
from ..runtime import RelayRuntime, get_runtime
from ..schemas import CommandResult

router = APIRouter(tags=["commands"])


@router.post("/commands", response_model=CommandResult)
async def submit_command(command: Command, runtime: RelayRuntime = Depends(get_runtime)):
    """Relay ``command`` to the connected controller.

    409 when no controller is connected, 502 when the controller link
    rejected the send. Malformed bodies get FastAPI's 422.
    """
    try:
        await runtime.service.submit_command(command)
    except ControllerUnavailable:
        raise HTTPException(status_code=409, detail="device not connected")
    except DeliveryFailed:
        raise HTTPException(status_code=502, detail="command delivery failed")
    return CommandResult()
