"""Health and readiness endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from ..runtime import RelayRuntime, get_runtime

router = APIRouter(tags=["health"])


@router.get("/")
def root():
    """Health check kept at the root path for existing probes."""
    return {"status": "okay"}


@router.get("/health")
def health():
    """Liveness probe: ok while the process is running."""
    return {"status": "ok"}


@router.get("/ready")
async def ready(runtime: RelayRuntime = Depends(get_runtime)):
    """Readiness probe: checks store connectivity."""
    if not await run_in_threadpool(runtime.store.ping):
        raise HTTPException(status_code=503, detail="not ready")
    return {"status": "ready"}
