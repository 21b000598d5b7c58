from datetime import datetime

from loguru import logger

from clients.jellyfin_client import JellyfinClient
from core.utils import parse_timestamp, utcnow
from models.jellyfin import BaseItemDto
from models.media import (AudioStream, Episode, Movie, Season, Series,
                          SubtitleStream)
from models.records import JellyfinCatalog
from models.sync import ServiceName
from services.source_service import SourceAdapter


def extract_streams(item: BaseItemDto) -> tuple[list[AudioStream], list[SubtitleStream]]:
    audio, subtitles = [], []
    for stream in item.MediaStreams:
        language = stream.Language or "Unknown"
        if stream.Type == "Audio":
            audio.append(AudioStream(
                language=language,
                display_title=stream.DisplayTitle,
                codec=stream.Codec,
                is_default=stream.IsDefault,
            ))
        elif stream.Type == "Subtitle":
            subtitles.append(SubtitleStream(
                language=language,
                display_title=stream.DisplayTitle,
                codec=stream.Codec,
                is_default=stream.IsDefault,
                is_external=stream.IsExternal,
            ))
    return audio, subtitles


def extract_watch_status(item: BaseItemDto) -> dict:
    """观看状态；进度仅在未看完且大于 0 时保留"""
    data = item.UserData
    if data is None:
        return {'is_watched': False, 'playback_progress': None, 'last_played': None}
    progress = None
    if not data.Played and data.PlayedPercentage and data.PlayedPercentage > 0:
        progress = min(data.PlayedPercentage / 100, 1.0)
    return {
        'is_watched': data.Played,
        'playback_progress': progress,
        'last_played': parse_timestamp(data.LastPlayedDate),
    }


def _has_file(item: BaseItemDto) -> bool:
    # 缺失的剧集在 Jellyfin 中以 Virtual 占位项出现
    return item.LocationType != "Virtual"


class JellyfinSource(SourceAdapter[JellyfinCatalog]):
    """主数据源：媒体库中的剧集（含季与单集）和电影"""
    name = ServiceName.JELLYFIN
    client: JellyfinClient

    async def fetch_catalog(self) -> JellyfinCatalog:
        now = utcnow()
        series: list[Series] = []
        movies: list[Movie] = []

        for library in await self.client.get_libraries():
            match library.CollectionType:
                case "tvshows":
                    for item in await self.client.get_series(library.ItemId):
                        series.append(await self._build_series(item, now))
                case "movies":
                    for item in await self.client.get_movies(library.ItemId):
                        movies.append(self._build_movie(item))
                case _:
                    logger.debug("跳过媒体库 {}（类型 {}）", library.Name, library.CollectionType)

        logger.info("Jellyfin 目录拉取完成：{} 部剧集，{} 部电影", len(series), len(movies))
        return JellyfinCatalog(series=series, movies=movies)

    async def _build_series(self, item: BaseItemDto, now: datetime) -> Series:
        seasons: list[Season] = []
        for season_item in await self.client.get_seasons(item.Id):
            season_number = season_item.IndexNumber or 0
            if season_number == 0:
                continue  # 特别篇不参与就绪评估
            episode_items = await self.client.get_episodes(item.Id, season_item.Id)
            episodes = [self._build_episode(ep, item.Id, season_number, now) for ep in episode_items]
            episodes.sort(key=lambda ep: ep.episode_number)
            seasons.append(Season(
                series_id=item.Id,
                season_number=season_number,
                title=season_item.Name or f"Season {season_number}",
                total_episodes=season_item.ChildCount or len(episodes),
                available_episodes=sum(1 for ep in episodes if ep.has_file),
                aired_episodes=sum(1 for ep in episodes if ep.has_aired),
                episodes=episodes,
            ))

        return Series(
            id=item.Id,
            title=item.Name or item.Id,
            year=item.ProductionYear,
            poster_image_id=item.Id if 'Primary' in item.ImageTags else None,
            tvdb_id=item.ProviderIds.get('Tvdb'),
            imdb_id=item.ProviderIds.get('Imdb'),
            date_added=parse_timestamp(item.DateCreated),
            seasons=seasons,
        )

    @staticmethod
    def _build_episode(item: BaseItemDto, series_id: str, season_number: int, now: datetime) -> Episode:
        premiere = parse_timestamp(item.PremiereDate)
        audio, subtitles = extract_streams(item)
        episode_number = item.IndexNumber or 0
        return Episode(
            id=item.Id,
            series_id=series_id,
            title=item.Name or f"Episode {episode_number}",
            season_number=item.ParentIndexNumber or season_number,
            episode_number=episode_number,
            has_file=_has_file(item),
            has_aired=premiere is None or premiere <= now,
            air_date=premiere,
            audio_streams=audio,
            subtitle_streams=subtitles,
            **extract_watch_status(item),
        )

    @staticmethod
    def _build_movie(item: BaseItemDto) -> Movie:
        audio, subtitles = extract_streams(item)
        return Movie(
            id=item.Id,
            title=item.Name or item.Id,
            year=item.ProductionYear,
            poster_image_id=item.Id if 'Primary' in item.ImageTags else None,
            tmdb_id=item.ProviderIds.get('Tmdb'),
            imdb_id=item.ProviderIds.get('Imdb'),
            date_added=parse_timestamp(item.DateCreated),
            has_file=_has_file(item),
            audio_streams=audio,
            subtitle_streams=subtitles,
            **extract_watch_status(item),
        )
