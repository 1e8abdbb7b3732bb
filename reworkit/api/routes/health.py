from fastapi import APIRouter, Depends
from typing import Dict, Any
from datetime import datetime, timezone

from reworkit import __version__
from reworkit.api.dependencies.store import get_result_store
from reworkit.storage.result_store import ResultStore


router = APIRouter()


@router.get("/health")
async def health_check(store: ResultStore = Depends(get_result_store)) -> Dict[str, Any]:
    return {
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "store": await store.health_check(),
    }
