"""同步周期编排

一次同步：各数据源独立拉取 -> 合并 -> 原子提交快照 -> 重新评估 -> 对比上一轮 -> 发送通知。
同一时刻只允许一个周期运行；运行中再次请求直接返回 False，不排队。
"""
import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

from loguru import logger

from clients.base_client import UpstreamError
from core.utils import utcnow
from models.events import MediaType, TransitionEvent, VerdictEntry, VerdictMap
from models.records import JellyfinCatalog
from models.rules import RulesConfig
from models.sync import ServiceName, ServiceStatus, SyncPhase, SyncState
from rules.evaluator import evaluate_movie, evaluate_season
from services.merge_service import merge_catalog
from services.snapshot_store import CatalogSnapshot, SnapshotStore
from services.source_service import SourceAdapter
from services.transition_service import detect_transitions


class Notifier(Protocol):
    async def dispatch(self, events: Sequence[TransitionEvent]) -> int: ...


def season_key(series_id: str, season_number: int) -> str:
    return f"{series_id}-s{season_number}"


def build_verdict_map(snapshot: CatalogSnapshot, config: RulesConfig) -> VerdictMap:
    """根据当前快照与配置计算所有季与电影的判定；hide_watched 时跳过已看完的条目"""
    verdicts: VerdictMap = {}
    for series in snapshot.series:
        for season in series.seasons:
            if config.hide_watched and season.is_watched:
                continue
            verdict = evaluate_season(season, series, config)
            key = season_key(series.id, season.season_number)
            verdicts[key] = VerdictEntry(
                media_id=key,
                media_title=series.title,
                media_type=MediaType.SEASON,
                status=verdict.status,
                season_number=season.season_number,
                episode_current=season.available_episodes,
                episode_total=season.total_episodes,
                poster_image_id=series.poster_image_id,
                rule_results=verdict.rule_results,
            )

    for movie in snapshot.movies:
        if config.hide_watched and movie.is_watched:
            continue
        verdict = evaluate_movie(movie, config)
        verdicts[movie.id] = VerdictEntry(
            media_id=movie.id,
            media_title=movie.title,
            media_type=MediaType.MOVIE,
            status=verdict.status,
            poster_image_id=movie.poster_image_id,
            rule_results=verdict.rule_results,
        )
    return verdicts


class SyncOrchestrator:
    def __init__(self,
                 store: SnapshotStore,
                 jellyfin: SourceAdapter,
                 sonarr: SourceAdapter,
                 radarr: SourceAdapter,
                 config_loader: Callable[[], Awaitable[RulesConfig]],
                 notifier: Notifier | None = None):
        self.store = store
        self.sources: dict[ServiceName, SourceAdapter] = {
            ServiceName.JELLYFIN: jellyfin,
            ServiceName.SONARR: sonarr,
            ServiceName.RADARR: radarr,
        }
        self.config_loader = config_loader
        self.notifier = notifier
        self._running = False
        # None 表示还没有基线（首次成功提交目录前不发送通知）
        self._previous_verdicts: VerdictMap | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def previous_verdicts(self) -> VerdictMap | None:
        return self._previous_verdicts

    async def run_cycle(self) -> bool:
        """执行一次同步周期；已有周期在运行时返回 False"""
        if self._running:
            logger.info("同步正在进行中，跳过本次请求")
            return False

        self._running = True
        try:
            await self._run()
        finally:
            self._running = False
        return True

    async def _fetch(self, name: ServiceName, status: ServiceStatus) -> tuple[Any, ServiceStatus]:
        adapter = self.sources[name]
        status = status.model_copy(update={'configured': adapter.configured})
        if not adapter.configured:
            return None, status
        try:
            data = await adapter.fetch_catalog()
        except UpstreamError as e:
            logger.error("{} 同步失败，保留上次成功的数据：{}", name, e)
            return None, status.mark_error(utcnow(), str(e))
        return data, status.mark_success(utcnow())

    async def _run(self) -> None:
        started = utcnow()
        snapshot = self.store.read()
        services = dict(snapshot.sync_state.services)
        self.store.write(sync_state=snapshot.sync_state.model_copy(update={
            'phase': SyncPhase.SYNCING,
            'last_sync_start': started,
        }))
        logger.info("开始同步")

        try:
            config = await self.config_loader()
            names = list(self.sources)
            results = await asyncio.gather(*(
                self._fetch(name, services.get(name, ServiceStatus(name=name))) for name in names
            ))
            fetched: dict[ServiceName, Any] = {}
            for name, (data, status) in zip(names, results):
                services[name] = status
                if data is not None:
                    fetched[name] = data

            # 只替换拉取成功的数据源的缓存
            changes = {}
            if ServiceName.JELLYFIN in fetched:
                changes['last_jellyfin'] = fetched[ServiceName.JELLYFIN]
            if ServiceName.SONARR in fetched:
                changes['last_sonarr'] = fetched[ServiceName.SONARR]
            if ServiceName.RADARR in fetched:
                changes['last_radarr'] = fetched[ServiceName.RADARR]
            snapshot = self.store.write(**changes) if changes else self.store.read()

            jellyfin: JellyfinCatalog | None = snapshot.last_jellyfin
            if jellyfin is not None:
                merged = merge_catalog(jellyfin, snapshot.last_sonarr, snapshot.last_radarr)
                self.store.commit_catalog(merged.series, merged.movies)
            else:
                logger.warning("Jellyfin 尚无可用数据，目录保持为空")
        finally:
            has_catalog = self.store.read().has_catalog
            self.store.write(sync_state=SyncState(
                phase=SyncPhase.IDLE if has_catalog else SyncPhase.INITIALIZING,
                last_sync_start=started,
                last_sync_end=utcnow(),
                services=services,
            ))

        snapshot = self.store.read()
        if not snapshot.has_catalog:
            return

        current = build_verdict_map(snapshot, config)
        events = detect_transitions(self._previous_verdicts, current)
        if events:
            logger.info("检测到 {} 个就绪状态提升", len(events))
            if self.notifier is not None:
                await self.notifier.dispatch(events)
        self._previous_verdicts = current
        logger.info("同步完成：{} 部剧集，{} 部电影", len(snapshot.series), len(snapshot.movies))
