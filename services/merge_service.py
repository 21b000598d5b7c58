"""多数据源合并

以 Jellyfin 目录为主，把 Sonarr / Radarr 的记录合并进去，得到统一的 Series / Movie。

匹配顺序：主外部 ID（TVDB / TMDB）-> IMDB ID -> 标题（不区分大小写）。
字段合并规则：
- 文件 / 播出标记：任一数据源为真即为真；
- 监控标记：取追踪服务的值，否则保持未知（None），不是 False；
- 每季总集数：追踪服务的统计优先，否则为合并后的剧集数；
- 音轨：主数据源非空时保留，否则用追踪服务的语言列表补充；
- 只存在于追踪服务中的剧集生成 has_file=False 的占位剧集。

合并是确定的、幂等的：对同样的输入再次合并得到结构相同的结果。
"""
from collections.abc import Iterable
from typing import TypeVar

from models.media import AudioStream, Episode, Movie, Season, Series
from models.records import (JellyfinCatalog, RadarrMovieRecord,
                            SonarrEpisodeRecord, SonarrSeasonRecord,
                            SonarrSeriesRecord)

RecordT = TypeVar('RecordT', SonarrSeriesRecord, RadarrMovieRecord)


class _RecordIndex:
    """按主 ID / IMDB ID / 小写标题索引追踪服务记录，同键先到先得"""

    def __init__(self, records: Iterable[RecordT], primary_id: str):
        self.by_primary: dict[str, RecordT] = {}
        self.by_imdb: dict[str, RecordT] = {}
        self.by_title: dict[str, RecordT] = {}
        for record in records:
            key = getattr(record, primary_id)
            if key:
                self.by_primary.setdefault(key, record)
            if record.imdb_id:
                self.by_imdb.setdefault(record.imdb_id, record)
            self.by_title.setdefault(record.title.lower(), record)

    def find(self, primary: str | None, imdb: str | None, title: str) -> RecordT | None:
        if primary and primary in self.by_primary:
            return self.by_primary[primary]
        if imdb and imdb in self.by_imdb:
            return self.by_imdb[imdb]
        return self.by_title.get(title.lower())


def _merge_episode(episode: Episode, record: SonarrEpisodeRecord) -> Episode:
    return episode.model_copy(update={
        'has_file': episode.has_file or record.has_file,
        'has_aired': episode.has_aired or record.has_aired,
        'is_monitored': record.monitored,
    })


def _placeholder_episode(series: Series, sonarr_id: int, record: SonarrEpisodeRecord) -> Episode:
    """只存在于 Sonarr 的剧集（已公布但尚未入库）"""
    return Episode(
        id=f"sonarr-{sonarr_id}-s{record.season_number}e{record.episode_number}",
        series_id=series.id,
        title=record.title,
        season_number=record.season_number,
        episode_number=record.episode_number,
        has_file=record.has_file,
        has_aired=record.has_aired,
        is_monitored=record.monitored,
    )


def _merge_season(season: Season, series: Series, match: SonarrSeriesRecord) -> Season:
    season_stats: SonarrSeasonRecord | None = next(
        (s for s in match.seasons if s.season_number == season.season_number), None)
    sonarr_episodes = {
        ep.episode_number: ep
        for ep in match.episodes
        if ep.season_number == season.season_number
    }

    episodes: list[Episode] = []
    seen: set[int] = set()
    for episode in season.episodes:
        record = sonarr_episodes.get(episode.episode_number)
        episodes.append(_merge_episode(episode, record) if record else episode)
        seen.add(episode.episode_number)
    for number, record in sonarr_episodes.items():
        if number not in seen:
            episodes.append(_placeholder_episode(series, match.sonarr_id, record))
    episodes.sort(key=lambda ep: (ep.episode_number, ep.id))

    if season_stats is not None and season_stats.total_episodes is not None:
        total = season_stats.total_episodes
    else:
        total = len(episodes)

    return Season(
        series_id=season.series_id,
        season_number=season.season_number,
        title=season.title,
        total_episodes=total,
        available_episodes=sum(1 for ep in episodes if ep.has_file),
        aired_episodes=sum(1 for ep in episodes if ep.has_aired),
        episodes=episodes,
    )


def _merge_one_series(series: Series, match: SonarrSeriesRecord) -> Series:
    return Series(
        id=series.id,
        title=series.title,
        year=series.year,
        poster_image_id=series.poster_image_id,
        tvdb_id=series.tvdb_id,
        imdb_id=series.imdb_id,
        date_added=series.date_added,
        seasons=[_merge_season(season, series, match) for season in series.seasons],
        language_profile=match.language_profile or series.language_profile,
        in_jellyfin=series.in_jellyfin,
        in_sonarr=True,
    )


def _merge_movie(movie: Movie, match: RadarrMovieRecord) -> Movie:
    if movie.audio_streams:
        audio_streams = movie.audio_streams
    else:
        audio_streams = [AudioStream(language=lang) for lang in match.audio_languages]
    return Movie(
        id=movie.id,
        title=movie.title,
        year=movie.year,
        poster_image_id=movie.poster_image_id,
        tmdb_id=movie.tmdb_id,
        imdb_id=movie.imdb_id,
        date_added=movie.date_added,
        has_file=movie.has_file or match.has_file,
        is_monitored=match.monitored,
        is_watched=movie.is_watched,
        playback_progress=movie.playback_progress,
        last_played=movie.last_played,
        audio_streams=audio_streams,
        subtitle_streams=movie.subtitle_streams,
        in_jellyfin=movie.in_jellyfin,
        in_radarr=True,
    )


def merge_series(series_list: list[Series], sonarr_records: list[SonarrSeriesRecord]) -> list[Series]:
    """合并 Jellyfin 剧集与 Sonarr 记录；未匹配的剧集原样返回"""
    index = _RecordIndex(sonarr_records, 'tvdb_id')
    merged = []
    for series in series_list:
        match = index.find(series.tvdb_id, series.imdb_id, series.title)
        merged.append(_merge_one_series(series, match) if match else series)
    return merged


def merge_movies(movies: list[Movie], radarr_records: list[RadarrMovieRecord]) -> list[Movie]:
    """合并 Jellyfin 电影与 Radarr 记录；未匹配的电影原样返回"""
    index = _RecordIndex(radarr_records, 'tmdb_id')
    merged = []
    for movie in movies:
        match = index.find(movie.tmdb_id, movie.imdb_id, movie.title)
        merged.append(_merge_movie(movie, match) if match else movie)
    return merged


def merge_catalog(catalog: JellyfinCatalog,
                  sonarr_records: list[SonarrSeriesRecord] | None = None,
                  radarr_records: list[RadarrMovieRecord] | None = None) -> JellyfinCatalog:
    return JellyfinCatalog(
        series=merge_series(catalog.series, sonarr_records or []),
        movies=merge_movies(catalog.movies, radarr_records or []),
    )
