from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, HttpUrl

from models.orm import Webhook, WebhookFilters, WebhookType
from models.readiness import ReadinessVerdict
from models.sync import ServiceStatus, SyncPhase, SyncState


class ServiceStatusDto(BaseModel):
    name: str
    connected: bool
    last_success: datetime | None = None
    last_error: datetime | None = None
    last_error_message: str | None = None

    @classmethod
    def from_status(cls, status: ServiceStatus) -> 'ServiceStatusDto':
        return cls(
            name=status.name.value,
            connected=status.connected,
            last_success=status.last_success,
            last_error=status.last_error,
            last_error_message=status.last_error_message,
        )

class HealthResponse(BaseModel):
    status: str
    phase: SyncPhase
    last_sync_start: datetime | None = None
    last_sync_end: datetime | None = None
    services: list[ServiceStatusDto]
    rules_config_error: str | None = None

class SyncStateResponse(BaseModel):
    message: str | None = None
    syncing: bool
    sync_state: SyncState
    rules_config_error: str | None = None

class WatchedUpdate(BaseModel):
    watched: bool

class WatchedResponse(BaseModel):
    success: bool
    cached: bool

class WebhookCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    url: HttpUrl
    type: WebhookType
    enabled: bool = True
    filters: WebhookFilters = Field(default_factory=WebhookFilters)

class WebhookDto(BaseModel):
    id: int
    name: str
    url: str
    type: WebhookType
    enabled: bool
    filters: WebhookFilters
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_orm_row(cls, webhook: Webhook) -> 'WebhookDto':
        return cls(
            id=webhook.id,
            name=webhook.name,
            url=webhook.url,
            type=WebhookType(webhook.type),
            enabled=webhook.enabled,
            filters=webhook.filter_model,
            created_at=webhook.created_at,
            updated_at=webhook.updated_at,
        )

class WebhookTestResponse(BaseModel):
    success: bool
    status_code: int | None = None
    error: str | None = None

# --- 就绪查询 ---

class SeasonReadinessDto(BaseModel):
    series_id: str
    series_title: str
    season_number: int
    season_title: str
    total_episodes: int
    available_episodes: int
    poster_image_id: str | None = None
    date_added: datetime | None = None
    verdict: ReadinessVerdict
    summary: str

class MovieReadinessDto(BaseModel):
    id: str
    title: str
    year: int | None = None
    poster_image_id: str | None = None
    date_added: datetime | None = None
    audio_languages: list[str]
    verdict: ReadinessVerdict
    summary: str

class ReadinessGroup(BaseModel):
    seasons: list[SeasonReadinessDto] = Field(default_factory=list)
    movies: list[MovieReadinessDto] = Field(default_factory=list)

class MediaCounts(BaseModel):
    ready: int
    almost_ready: int
    in_progress: int

class MediaOverviewResponse(BaseModel):
    ready: ReadinessGroup
    almost_ready: ReadinessGroup
    counts: MediaCounts
    sync_state: SyncState

class ContinueItemDto(BaseModel):
    """正在观看的单集或电影"""
    type: Literal["episode", "movie"]
    id: str
    title: str
    series_title: str | None = None
    season_number: int | None = None
    episode_number: int | None = None
    year: int | None = None
    poster_image_id: str | None = None
    playback_progress: float
    last_played: datetime | None = None

class ContinueResponse(BaseModel):
    items: list[ContinueItemDto]
