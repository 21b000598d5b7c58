from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class ServiceName(StrEnum):
    JELLYFIN = "jellyfin"
    SONARR = "sonarr"
    RADARR = "radarr"

class SyncPhase(StrEnum):
    INITIALIZING = "initializing"
    SYNCING = "syncing"
    IDLE = "idle"

class ServiceStatus(BaseModel):
    """上游服务健康状态"""
    model_config = ConfigDict(frozen=True)

    name: ServiceName
    configured: bool = False
    connected: bool = False
    last_success: datetime | None = None
    last_error: datetime | None = None
    last_error_message: str | None = None

    def mark_success(self, when: datetime) -> 'ServiceStatus':
        return self.model_copy(update={'connected': True, 'last_success': when})

    def mark_error(self, when: datetime, message: str) -> 'ServiceStatus':
        return self.model_copy(update={
            'connected': False,
            'last_error': when,
            'last_error_message': message,
        })

class SyncState(BaseModel):
    """同步状态"""
    model_config = ConfigDict(frozen=True)

    phase: SyncPhase = SyncPhase.INITIALIZING
    last_sync_start: datetime | None = None
    last_sync_end: datetime | None = None
    services: dict[ServiceName, ServiceStatus]

    @classmethod
    def initial(cls, jellyfin: bool = True, sonarr: bool = False, radarr: bool = False) -> 'SyncState':
        configured = {
            ServiceName.JELLYFIN: jellyfin,
            ServiceName.SONARR: sonarr,
            ServiceName.RADARR: radarr,
        }
        return cls(services={
            name: ServiceStatus(name=name, configured=flag)
            for name, flag in configured.items()
        })
