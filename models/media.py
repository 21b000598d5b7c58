from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AudioStream(BaseModel):
    """音轨"""
    model_config = ConfigDict(frozen=True)

    language: str
    display_title: str | None = None
    codec: str | None = None
    is_default: bool = False

class SubtitleStream(BaseModel):
    """字幕轨"""
    model_config = ConfigDict(frozen=True)

    language: str
    display_title: str | None = None
    codec: str | None = None
    is_default: bool = False
    is_external: bool = False

class Episode(BaseModel):
    """单集

    身份为 (series_id, season_number, episode_number)。
    playback_progress 仅在未看完且进度 > 0 时非空。
    """
    model_config = ConfigDict(frozen=True)

    id: str
    series_id: str
    title: str
    season_number: int
    episode_number: int

    has_file: bool
    has_aired: bool
    is_monitored: bool | None = None  # None 表示未知（追踪服务未提供）
    air_date: datetime | None = None

    is_watched: bool = False
    playback_progress: float | None = Field(default=None, ge=0, le=1)
    last_played: datetime | None = None

    audio_streams: list[AudioStream] = Field(default_factory=list)
    subtitle_streams: list[SubtitleStream] = Field(default_factory=list)

    def with_watched(self, watched: bool) -> 'Episode':
        """返回更新观看状态后的副本。
        标记已看会清除播放进度；标记未看不会恢复进度。
        """
        return self.model_copy(update={
            'is_watched': watched,
            'playback_progress': None if watched else self.playback_progress,
        })

class Season(BaseModel):
    """季"""
    model_config = ConfigDict(frozen=True)

    series_id: str
    season_number: int
    title: str
    total_episodes: int
    available_episodes: int
    aired_episodes: int
    episodes: list[Episode] = Field(default_factory=list)

    @property
    def is_watched(self) -> bool:
        """所有已有文件的剧集均已观看（且至少有一集）"""
        with_file = [ep for ep in self.episodes if ep.has_file]
        return bool(with_file) and all(ep.is_watched for ep in with_file)

class Series(BaseModel):
    """剧集"""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    year: int | None = None
    poster_image_id: str | None = None
    tvdb_id: str | None = None
    imdb_id: str | None = None
    date_added: datetime | None = None
    seasons: list[Season] = Field(default_factory=list)
    language_profile: str | None = None

    in_jellyfin: bool = True
    in_sonarr: bool = False

class Movie(BaseModel):
    """电影"""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    year: int | None = None
    poster_image_id: str | None = None
    tmdb_id: str | None = None
    imdb_id: str | None = None
    date_added: datetime | None = None

    has_file: bool = True
    is_monitored: bool | None = None

    is_watched: bool = False
    playback_progress: float | None = Field(default=None, ge=0, le=1)
    last_played: datetime | None = None

    audio_streams: list[AudioStream] = Field(default_factory=list)
    subtitle_streams: list[SubtitleStream] = Field(default_factory=list)

    in_jellyfin: bool = True
    in_radarr: bool = False

    def with_watched(self, watched: bool) -> 'Movie':
        """返回更新观看状态后的副本，规则同 Episode.with_watched"""
        return self.model_copy(update={
            'is_watched': watched,
            'playback_progress': None if watched else self.playback_progress,
        })
