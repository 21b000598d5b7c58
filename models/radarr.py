from pydantic import BaseModel, Field


class Languages(BaseModel):
    """Radarr 语言模型"""
    id: int
    name: str | None = None

class MediaInfoResource(BaseModel):
    """Radarr 媒体信息模型"""
    audioLanguages: str | None = None
    subtitles: str | None = None

class MovieFileResource(BaseModel):
    """Radarr 电影文件模型"""
    id: int
    movieId: int | None = None
    languages: list[Languages] | None = None
    mediaInfo: MediaInfoResource | None = None

class MovieResource(BaseModel):
    """Radarr 电影模型"""
    id: int
    title: str
    year: int | None = None
    tmdbId: int | None = None
    imdbId: str | None = None
    monitored: bool
    hasFile: bool = False
    added: str | None = None
    movieFile: MovieFileResource | None = None

    @property
    def audio_languages(self) -> list[str]:
        """电影文件的音轨语言列表，优先使用 languages，其次解析 mediaInfo"""
        if self.movieFile is None:
            return []
        if self.movieFile.languages:
            return [lang.name for lang in self.movieFile.languages if lang.name]
        if self.movieFile.mediaInfo and self.movieFile.mediaInfo.audioLanguages:
            return [part.strip() for part in self.movieFile.mediaInfo.audioLanguages.split('/') if part.strip()]
        return []
