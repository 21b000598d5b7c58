from fastapi import APIRouter, Depends, HTTPException, Response, status

from core.dependencies import (get_rules_config_service, get_snapshot_store,
                               get_sync_scheduler)
from models.schemas import HealthResponse, ServiceStatusDto, SyncStateResponse
from models.sync import SyncPhase
from services.config_service import RulesConfigService
from services.scheduler_service import SyncScheduler
from services.snapshot_store import SnapshotStore

router = APIRouter(tags=["sync"])

@router.get("/health", response_model=HealthResponse)
async def health(response: Response,
                 store: SnapshotStore = Depends(get_snapshot_store),
                 rules_config: RulesConfigService = Depends(get_rules_config_service)):
    state = store.read().sync_state
    initializing = state.phase == SyncPhase.INITIALIZING
    if initializing:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(
        status="initializing" if initializing else "ok",
        phase=state.phase,
        last_sync_start=state.last_sync_start,
        last_sync_end=state.last_sync_end,
        services=[ServiceStatusDto.from_status(s) for s in state.services.values() if s.configured],
        rules_config_error=rules_config.last_error,
    )

@router.get("/api/sync", response_model=SyncStateResponse)
async def get_sync_state(store: SnapshotStore = Depends(get_snapshot_store),
                         scheduler: SyncScheduler = Depends(get_sync_scheduler),
                         rules_config: RulesConfigService = Depends(get_rules_config_service)):
    return SyncStateResponse(
        syncing=scheduler.is_running,
        sync_state=store.read().sync_state,
        rules_config_error=rules_config.last_error,
    )

@router.post("/api/sync", response_model=SyncStateResponse, status_code=status.HTTP_202_ACCEPTED)
async def trigger_sync(store: SnapshotStore = Depends(get_snapshot_store),
                       scheduler: SyncScheduler = Depends(get_sync_scheduler)):
    if not scheduler.trigger_in_background():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Sync already in progress")
    return SyncStateResponse(message="Sync triggered", syncing=True, sync_state=store.read().sync_state)
