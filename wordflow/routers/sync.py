"""
Sync Router - API endpoints for replication with the remote vocabulary store

=== WHAT IT COVERS ===
1. Configure remote credentials at runtime
2. Push local changes, pull remote changes, or both
3. Inspect engine state (last sync, cursor, pending / failed counts)

=== ERRORS ===
- 400: sync not configured
- 409: another sync is already running
Per-entry failures never fail the request; they show up in the counts and in
last_error.
"""
from fastapi import APIRouter, Depends

from wordflow.core.dependencies import get_sync_engine
from wordflow.schemas.sync import SyncConfigureRequest, SyncResultResponse, SyncStatusResponse
from wordflow.services import SyncEngine

router = APIRouter(
    prefix="/sync",
    tags=["Sync"]
)


@router.post("/configure", response_model=SyncStatusResponse)
async def configure_sync(
    request: SyncConfigureRequest,
    engine: SyncEngine = Depends(get_sync_engine)
):
    """
    🔧 CONFIGURE SYNC

    Example request:
    {"remote_url": "https://xyz.supabase.co", "api_key": "..."}
    """
    engine.configure(request.remote_url, request.api_key)
    return SyncStatusResponse.model_validate(await engine.status())


@router.post("/push", response_model=SyncResultResponse)
async def push_changes(engine: SyncEngine = Depends(get_sync_engine)):
    """
    📤 PUSH

    Sends every pending or failed entry; returns how many the remote accepted.
    """
    pushed = await engine.sync_to_backend()
    return SyncResultResponse(pushed=pushed)


@router.post("/pull", response_model=SyncResultResponse)
async def pull_changes(engine: SyncEngine = Depends(get_sync_engine)):
    """
    📥 PULL

    Fetches remote rows changed since the last pull; newer remote rows win.
    """
    pulled = await engine.sync_from_backend()
    return SyncResultResponse(pulled=pulled)


@router.post("/full", response_model=SyncResultResponse)
async def full_sync(engine: SyncEngine = Depends(get_sync_engine)):
    """🔄 PUSH THEN PULL"""
    result = await engine.full_sync()
    return SyncResultResponse(pushed=result.pushed, pulled=result.pulled)


@router.get("/status", response_model=SyncStatusResponse)
async def get_sync_status(engine: SyncEngine = Depends(get_sync_engine)):
    return SyncStatusResponse.model_validate(await engine.status())
