"""
Sync API - remote mirroring status and transaction log

Endpoints:
- GET  /api/v1/sync/status  - connected / syncing / offline plus entry counts
- GET  /api/v1/sync/log     - transaction log entries
- POST /api/v1/sync/flush   - wait for queued remote writes and reconcile
- GET  /api/v1/sync/events  - recent domain events

Author: TM3
Date: 2026-10-19
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from fastpos.api.deps import get_pos
from fastpos.services.pos import PointOfSale
from fastpos.services.sync_service import EntryState

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/status")
async def get_sync_status(pos: PointOfSale = Depends(get_pos)):
    return {"status": "success", "data": pos.sync.get_status()}


@router.get("/log")
async def get_sync_log(
    state: Optional[EntryState] = Query(None, description="Filter by entry state"),
    limit: int = Query(100, ge=1, le=1000),
    pos: PointOfSale = Depends(get_pos)
):
    entries = pos.sync.entries(state)[-limit:]
    return {"status": "success", "count": len(entries), "data": [entry.to_dict() for entry in entries]}


@router.post("/flush")
def flush_sync(
    timeout: float = Query(30.0, gt=0, description="Seconds to wait for queued writes"),
    pos: PointOfSale = Depends(get_pos)
):
    """Blocking: runs in the threadpool, not on the event loop"""
    resolved = pos.sync.flush(timeout=timeout)
    logger.info(f"Sync flush resolved {len(resolved)} failed entries")
    return {
        "status": "success",
        "resolved": [entry.to_dict() for entry in resolved],
        "data": pos.sync.get_status(),
    }


@router.get("/events")
async def get_events(limit: int = Query(50, ge=1, le=100), pos: PointOfSale = Depends(get_pos)):
    events = pos.events.recent(limit)
    return {"status": "success", "count": len(events), "data": [event.to_dict() for event in events]}
