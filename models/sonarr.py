from pydantic import BaseModel, Field


class SeasonStatisticsResource(BaseModel):
    """Sonarr 季统计模型"""
    episodeFileCount: int | None = None
    episodeCount: int | None = None
    totalEpisodeCount: int | None = None
    percentOfEpisodes: float | None = None

class SeasonResource(BaseModel):
    """Sonarr 季模型"""
    seasonNumber: int
    monitored: bool
    statistics: SeasonStatisticsResource | None = None

class SeriesResource(BaseModel):
    """Sonarr 剧集模型"""
    id: int
    title: str
    year: int | None = None
    tvdbId: int | None = None
    imdbId: str | None = None
    monitored: bool
    seasons: list[SeasonResource] = Field(default_factory=list)
    languageProfileId: int | None = None # Sonarr v4 已废弃
    added: str | None = None

class EpisodeResource(BaseModel):
    """Sonarr 单集模型"""
    id: int
    seriesId: int
    seasonNumber: int
    episodeNumber: int
    title: str | None = None
    airDateUtc: str | None = None # datetime
    hasFile: bool
    monitored: bool

class LanguageResource(BaseModel):
    """Sonarr 语言模型"""
    id: int
    name: str

class LanguageProfileItem(BaseModel):
    language: LanguageResource
    allowed: bool

class LanguageProfileResource(BaseModel):
    """Sonarr 语言配置文件模型（v3）"""
    id: int
    name: str
    languages: list[LanguageProfileItem] = Field(default_factory=list)
