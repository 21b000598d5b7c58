"""各数据源规范化后的记录类型。

每个适配器只产出自己的记录类型，合并逻辑（merge_service）是唯一同时
了解三种记录的地方。
"""
from pydantic import BaseModel, ConfigDict, Field

from models.media import Movie, Series


class JellyfinCatalog(BaseModel):
    """主数据源（媒体服务器）的目录视图"""
    model_config = ConfigDict(frozen=True)

    series: list[Series] = Field(default_factory=list)
    movies: list[Movie] = Field(default_factory=list)

# --- Sonarr ---

class SonarrEpisodeRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    season_number: int
    episode_number: int
    title: str
    has_file: bool
    monitored: bool
    has_aired: bool

class SonarrSeasonRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    season_number: int
    monitored: bool
    total_episodes: int | None = None  # 统计缺失时为 None
    episodes_with_files: int | None = None

class SonarrSeriesRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    sonarr_id: int
    title: str
    tvdb_id: str | None = None
    imdb_id: str | None = None
    monitored: bool
    language_profile: str | None = None
    seasons: list[SonarrSeasonRecord] = Field(default_factory=list)
    episodes: list[SonarrEpisodeRecord] = Field(default_factory=list)

# --- Radarr ---

class RadarrMovieRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    radarr_id: int
    title: str
    tmdb_id: str | None = None
    imdb_id: str | None = None
    monitored: bool
    has_file: bool
    audio_languages: list[str] = Field(default_factory=list)
