from fastapi import APIRouter, Depends, HTTPException, status

from clients.base_client import UpstreamError
from core.dependencies import get_media_query_service, get_watch_service
from models.schemas import (ContinueResponse, MediaOverviewResponse,
                            WatchedResponse, WatchedUpdate)
from services.media_query_service import MediaQueryService
from services.source_service import SourceNotConfiguredError
from services.watch_service import WatchStateService

router = APIRouter(prefix="/api/media", tags=["media"])

@router.get("", response_model=MediaOverviewResponse)
async def media_overview(service: MediaQueryService = Depends(get_media_query_service)):
    return await service.overview()

@router.get("/continue", response_model=ContinueResponse)
async def continue_watching(service: MediaQueryService = Depends(get_media_query_service)):
    return ContinueResponse(items=service.continue_watching())

@router.post("/{item_id}/watched", response_model=WatchedResponse)
async def set_watched(item_id: str, body: WatchedUpdate,
                      service: WatchStateService = Depends(get_watch_service)):
    try:
        cached = await service.set_watched(item_id, body.watched)
    except SourceNotConfiguredError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Jellyfin is not configured")
    except UpstreamError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    return WatchedResponse(success=True, cached=cached)
