from fastapi import Request

from services.config_service import RulesConfigService
from services.media_query_service import MediaQueryService
from services.notification_service import NotificationService
from services.scheduler_service import SyncScheduler
from services.snapshot_store import SnapshotStore
from services.watch_service import WatchStateService


def get_snapshot_store(request: Request) -> SnapshotStore:
    """获取快照存储实例。"""
    return request.app.state.snapshot_store

def get_sync_scheduler(request: Request) -> SyncScheduler:
    """获取同步调度器实例。"""
    return request.app.state.sync_scheduler

def get_rules_config_service(request: Request) -> RulesConfigService:
    return request.app.state.rules_config

def get_watch_service(request: Request) -> WatchStateService:
    """获取观看状态服务实例。"""
    return request.app.state.watch_service

def get_media_query_service(request: Request) -> MediaQueryService:
    return request.app.state.media_query

def get_notification_service(request: Request) -> NotificationService:
    """获取通知服务实例。"""
    return request.app.state.notification_service
