from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from loguru import logger

from clients.jellyfin_client import JellyfinClient
from clients.radarr_client import RadarrClient
from clients.sonarr_client import SonarrClient
from core.config import get_settings
from core.database import async_engine, async_session, create_tables
from core.initialization import check_sqlite_version, ensure_parent_dirs
from models.sync import ServiceName, SyncState
from services.config_service import RulesConfigService
from services.jellyfin_source import JellyfinSource
from services.media_query_service import MediaQueryService
from services.notification_service import NotificationService
from services.payload_formatter import PayloadFormatter
from services.radarr_source import RadarrSource
from services.scheduler_service import SyncScheduler
from services.snapshot_store import CatalogSnapshot, SnapshotStore
from services.sonarr_source import SonarrSource
from services.source_service import SourceAdapter, UnconfiguredSource
from services.sync_orchestrator import SyncOrchestrator
from services.watch_service import WatchStateService

settings = get_settings()


def build_sources() -> tuple[SourceAdapter, SourceAdapter, SourceAdapter]:
    """根据环境配置构造三个数据源，未配置的使用 UnconfiguredSource"""
    timeout = httpx.Timeout(settings.source_timeout)

    if settings.jellyfin_configured:
        jellyfin = JellyfinSource(JellyfinClient(
            client=httpx.AsyncClient(base_url=settings.jellyfin_url.rstrip('/'), timeout=timeout),
            api_key=settings.jellyfin_api_key,
            user_id=settings.jellyfin_user_id,
        ))
    else:
        logger.warning("Jellyfin 未配置（需要 JELLYFIN_URL / JELLYFIN_API_KEY / JELLYFIN_USER_ID）")
        jellyfin = UnconfiguredSource(ServiceName.JELLYFIN)

    if settings.sonarr_configured:
        sonarr = SonarrSource(SonarrClient(
            client=httpx.AsyncClient(base_url=settings.sonarr_url.rstrip('/'), timeout=timeout),
            api_key=settings.sonarr_api_key,
        ))
    else:
        sonarr = UnconfiguredSource(ServiceName.SONARR)

    if settings.radarr_configured:
        radarr = RadarrSource(RadarrClient(
            client=httpx.AsyncClient(base_url=settings.radarr_url.rstrip('/'), timeout=timeout),
            api_key=settings.radarr_api_key,
        ))
    else:
        radarr = UnconfiguredSource(ServiceName.RADARR)

    return jellyfin, sonarr, radarr


@asynccontextmanager
async def lifespan(app: FastAPI):
    check_sqlite_version()
    ensure_parent_dirs(settings.database_path)
    logger.info("启动应用程序生命周期上下文")

    app.state.db_engine = async_engine
    await create_tables(app.state.db_engine)

    jellyfin, sonarr, radarr = build_sources()
    app.state.sources = (jellyfin, sonarr, radarr)

    app.state.snapshot_store = SnapshotStore(CatalogSnapshot(sync_state=SyncState.initial(
        jellyfin=jellyfin.configured,
        sonarr=sonarr.configured,
        radarr=radarr.configured,
    )))
    app.state.rules_config = RulesConfigService(async_session, settings.rules_file)
    app.state.media_query = MediaQueryService(app.state.snapshot_store, app.state.rules_config.load)

    app.state.webhook_client = httpx.AsyncClient()
    app.state.notification_service = NotificationService(
        session_factory=async_session,
        client=app.state.webhook_client,
        formatter=PayloadFormatter(public_url=settings.jellyfin_public_url or settings.jellyfin_url),
        timeout=settings.webhook_timeout,
    )

    app.state.orchestrator = SyncOrchestrator(
        store=app.state.snapshot_store,
        jellyfin=jellyfin,
        sonarr=sonarr,
        radarr=radarr,
        config_loader=app.state.rules_config.load,
        notifier=app.state.notification_service,
    )
    app.state.watch_service = WatchStateService(
        client=jellyfin.client if isinstance(jellyfin, JellyfinSource) else None,
        store=app.state.snapshot_store,
    )

    app.state.sync_scheduler = SyncScheduler(app.state.orchestrator.run_cycle)
    if jellyfin.configured:
        app.state.sync_scheduler.start(settings.sync_interval_minutes)
    else:
        logger.warning("Jellyfin 未配置，同步调度未启动")

    yield

    logger.info("关闭应用程序生命周期上下文")
    await app.state.sync_scheduler.stop()

    for source in app.state.sources:
        await source.close()
    await app.state.webhook_client.aclose()

    if app.state.db_engine:
        await app.state.db_engine.dispose()
    logger.info("应用程序生命周期上下文已关闭")
