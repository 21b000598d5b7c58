"""快照存储

保存合并后的目录、各数据源最近一次成功拉取的数据以及同步状态。
每次写入都整体替换不可变的 CatalogSnapshot，读者只会看到完整的旧快照或新快照。
"""
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from models.media import Movie, Series
from models.records import (JellyfinCatalog, RadarrMovieRecord,
                            SonarrSeriesRecord)
from models.sync import SyncState


class CatalogSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    series: list[Series] = Field(default_factory=list)
    movies: list[Movie] = Field(default_factory=list)
    sync_state: SyncState = Field(default_factory=SyncState.initial)
    # 最近一次成功拉取的数据，拉取失败时保留
    last_jellyfin: JellyfinCatalog | None = None
    last_sonarr: list[SonarrSeriesRecord] = Field(default_factory=list)
    last_radarr: list[RadarrMovieRecord] = Field(default_factory=list)
    # 是否已经提交过至少一次目录
    has_catalog: bool = False

    def find_item(self, item_id: str) -> Series | Movie | None:
        """按 ID 查找单集所属剧集或电影"""
        for series in self.series:
            for season in series.seasons:
                if any(ep.id == item_id for ep in season.episodes):
                    return series
        for movie in self.movies:
            if movie.id == item_id:
                return movie
        return None


def _apply_watched(series_list: list[Series], movies: list[Movie],
                   overrides: dict[str, bool]) -> tuple[list[Series], list[Movie]]:
    if not overrides:
        return series_list, movies

    new_series = []
    for series in series_list:
        seasons = []
        for season in series.seasons:
            if any(ep.id in overrides for ep in season.episodes):
                episodes = [
                    ep.with_watched(overrides[ep.id]) if ep.id in overrides else ep
                    for ep in season.episodes
                ]
                season = season.model_copy(update={'episodes': episodes})
            seasons.append(season)
        new_series.append(series.model_copy(update={'seasons': seasons}))

    new_movies = [
        movie.with_watched(overrides[movie.id]) if movie.id in overrides else movie
        for movie in movies
    ]
    return new_series, new_movies


class SnapshotStore:
    """单写多读的快照存储（内存实现）"""

    def __init__(self, initial: CatalogSnapshot | None = None):
        self._snapshot = initial or CatalogSnapshot()
        # 手动标记的观看状态，跨同步周期保留，直到上游数据一致
        self._watch_overrides: dict[str, bool] = {}

    def read(self) -> CatalogSnapshot:
        return self._snapshot

    def write(self, **changes) -> CatalogSnapshot:
        """以部分字段更新替换整个快照"""
        unknown = set(changes) - set(CatalogSnapshot.model_fields)
        if unknown:
            raise KeyError(f"未知的快照字段: {', '.join(sorted(unknown))}")
        self._snapshot = self._snapshot.model_copy(update=changes)
        return self._snapshot

    def commit_catalog(self, series: list[Series], movies: list[Movie]) -> CatalogSnapshot:
        """原子地替换合并后的目录，并重新应用尚未被上游确认的观看状态"""
        self._prune_watch_overrides(series, movies)
        series, movies = _apply_watched(series, movies, self._watch_overrides)
        return self.write(series=series, movies=movies, has_catalog=True)

    def mark_watched(self, item_id: str, watched: bool) -> bool:
        """乐观地更新单集或电影的观看状态；未找到返回 False"""
        snapshot = self._snapshot
        if snapshot.find_item(item_id) is None:
            logger.warning("标记观看状态失败，未找到媒体项：{}", item_id)
            return False
        self._watch_overrides[item_id] = watched
        series, movies = _apply_watched(snapshot.series, snapshot.movies, {item_id: watched})
        self.write(series=series, movies=movies)
        return True

    @property
    def watch_overrides(self) -> dict[str, bool]:
        return dict(self._watch_overrides)

    def _prune_watch_overrides(self, series: list[Series], movies: list[Movie]) -> None:
        if not self._watch_overrides:
            return
        upstream: dict[str, bool] = {movie.id: movie.is_watched for movie in movies}
        for s in series:
            for season in s.seasons:
                upstream.update({ep.id: ep.is_watched for ep in season.episodes})
        for item_id, watched in list(self._watch_overrides.items()):
            # 上游已一致或条目已消失时不再需要覆盖
            if upstream.get(item_id, watched) == watched:
                del self._watch_overrides[item_id]
