from fastapi import APIRouter, Depends

from ..runtime import RelayRuntime, get_runtime
from ..schemas import RelayStatsOut

router = APIRouter(tags=["stats"])


@router.get("/stats", response_model=RelayStatsOut)
def stats(runtime: RelayRuntime = Depends(get_runtime)):
    """Relay counters plus current connection counts."""
    result = runtime.stats.to_dict()
    result["connections"] = runtime.registry.counts()
    return result
