"""读取侧查询

判定不做缓存：每次请求都用当前快照与当前规则配置重新评估，
保证页面、数量统计与通知使用同一套规则。
"""
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from models.media import Movie, Season, Series
from models.readiness import ReadinessStatus, ReadinessVerdict
from models.rules import RulesConfig
from models.schemas import (ContinueItemDto, MediaCounts,
                            MediaOverviewResponse, MovieReadinessDto,
                            ReadinessGroup, SeasonReadinessDto)
from rules.evaluator import evaluate_movie, evaluate_season
from services.snapshot_store import SnapshotStore

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def summarize(verdict: ReadinessVerdict) -> str:
    """规则结果的简短摘要，如 "9/10 episodes · eng audio" """
    return " · ".join(r.compact_detail for r in verdict.rule_results if r.compact_detail)


def _newest_first(items, key):
    return sorted(items, key=lambda item: key(item) or _OLDEST, reverse=True)


def _season_item(series: Series, season: Season, verdict: ReadinessVerdict) -> SeasonReadinessDto:
    return SeasonReadinessDto(
        series_id=series.id,
        series_title=series.title,
        season_number=season.season_number,
        season_title=season.title,
        total_episodes=season.total_episodes,
        available_episodes=season.available_episodes,
        poster_image_id=series.poster_image_id,
        date_added=series.date_added,
        verdict=verdict,
        summary=summarize(verdict),
    )


def _movie_item(movie: Movie, verdict: ReadinessVerdict) -> MovieReadinessDto:
    return MovieReadinessDto(
        id=movie.id,
        title=movie.title,
        year=movie.year,
        poster_image_id=movie.poster_image_id,
        date_added=movie.date_added,
        audio_languages=list(dict.fromkeys(s.language for s in movie.audio_streams)),
        verdict=verdict,
        summary=summarize(verdict),
    )


def _in_progress(progress: float | None, watched: bool) -> bool:
    return progress is not None and progress > 0 and not watched


class MediaQueryService:
    def __init__(self, store: SnapshotStore, config_loader: Callable[[], Awaitable[RulesConfig]]):
        self.store = store
        self.config_loader = config_loader

    async def overview(self) -> MediaOverviewResponse:
        """就绪 / 即将就绪的季与电影（按加入时间倒序）及各分组数量；hide_watched 时跳过已看完的条目"""
        config = await self.config_loader()
        snapshot = self.store.read()
        groups = {
            ReadinessStatus.READY: ([], []),
            ReadinessStatus.ALMOST_READY: ([], []),
        }

        for series in snapshot.series:
            for season in series.seasons:
                if config.hide_watched and season.is_watched:
                    continue
                verdict = evaluate_season(season, series, config)
                if verdict.status in groups:
                    groups[verdict.status][0].append(_season_item(series, season, verdict))

        for movie in snapshot.movies:
            if config.hide_watched and movie.is_watched:
                continue
            verdict = evaluate_movie(movie, config)
            if verdict.status in groups:
                groups[verdict.status][1].append(_movie_item(movie, verdict))

        ready, almost_ready = (
            ReadinessGroup(
                seasons=_newest_first(seasons, lambda item: item.date_added),
                movies=_newest_first(movies, lambda item: item.date_added),
            )
            for seasons, movies in (groups[ReadinessStatus.READY], groups[ReadinessStatus.ALMOST_READY])
        )
        return MediaOverviewResponse(
            ready=ready,
            almost_ready=almost_ready,
            counts=MediaCounts(
                ready=len(ready.seasons) + len(ready.movies),
                almost_ready=len(almost_ready.seasons) + len(almost_ready.movies),
                in_progress=len(self.continue_watching()),
            ),
            sync_state=snapshot.sync_state,
        )

    def continue_watching(self) -> list[ContinueItemDto]:
        """看到一半的单集与电影，按最近播放时间倒序"""
        snapshot = self.store.read()
        items: list[ContinueItemDto] = []
        for series in snapshot.series:
            for season in series.seasons:
                for episode in season.episodes:
                    if not _in_progress(episode.playback_progress, episode.is_watched):
                        continue
                    items.append(ContinueItemDto(
                        type="episode",
                        id=episode.id,
                        title=episode.title,
                        series_title=series.title,
                        season_number=episode.season_number,
                        episode_number=episode.episode_number,
                        poster_image_id=series.poster_image_id,
                        playback_progress=episode.playback_progress,
                        last_played=episode.last_played,
                    ))

        for movie in snapshot.movies:
            if not _in_progress(movie.playback_progress, movie.is_watched):
                continue
            items.append(ContinueItemDto(
                type="movie",
                id=movie.id,
                title=movie.title,
                year=movie.year,
                poster_image_id=movie.poster_image_id,
                playback_progress=movie.playback_progress,
                last_played=movie.last_played,
            ))
        return _newest_first(items, lambda item: item.last_played)
