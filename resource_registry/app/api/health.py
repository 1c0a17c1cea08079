"""
Health probe.

Returns a heartbeat payload for readiness checks together with the
number of stored resources.  Reaching the store means the data file
was loaded successfully; a store that cannot initialise makes the probe
fail with a server error.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..services.resource_store import ResourceStore
from .deps import get_store

router = APIRouter()


@router.get("/health", response_model=Dict[str, Any])
async def health(store: ResourceStore = Depends(get_store)) -> Dict[str, Any]:
    """Return service status, current time and resource count."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "resources": await store.count(),
    }
