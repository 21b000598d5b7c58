from loguru import logger

from clients.radarr_client import RadarrClient
from models.records import RadarrMovieRecord
from models.sync import ServiceName
from services.source_service import SourceAdapter


class RadarrSource(SourceAdapter[list[RadarrMovieRecord]]):
    """追踪服务 B：电影监控状态与文件音轨语言"""
    name = ServiceName.RADARR
    client: RadarrClient

    async def fetch_catalog(self) -> list[RadarrMovieRecord]:
        movies = await self.client.get_all_movies()
        records = [
            RadarrMovieRecord(
                radarr_id=movie.id,
                title=movie.title,
                tmdb_id=str(movie.tmdbId) if movie.tmdbId else None,
                imdb_id=movie.imdbId or None,
                monitored=movie.monitored,
                has_file=movie.hasFile,
                audio_languages=movie.audio_languages,
            )
            for movie in movies
        ]
        logger.info("Radarr 目录拉取完成：{} 部电影", len(records))
        return records
