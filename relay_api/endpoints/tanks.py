"""Consulta de lecturas persistidas (solo lectura, no pasa por el registro)."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..errors import StoreError
from ..runtime import RelayRuntime, get_runtime
from ..schemas import StoredReading

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tanks"])


@router.get("/tanks", response_model=List[StoredReading])
def list_tanks(runtime: RelayRuntime = Depends(get_runtime)):
    try:
        return runtime.store.list_readings()
    except StoreError:
        logger.exception("[DB] Failed to list readings")
        raise HTTPException(status_code=503, detail="store unavailable")
