from loguru import logger

from clients.base_client import UpstreamError
from clients.sonarr_client import SonarrClient
from core.utils import parse_timestamp, utcnow
from models.records import (SonarrEpisodeRecord, SonarrSeasonRecord,
                            SonarrSeriesRecord)
from models.sync import ServiceName
from services.source_service import SourceAdapter


class SonarrSource(SourceAdapter[list[SonarrSeriesRecord]]):
    """追踪服务 A：剧集监控状态、每季统计与单集文件状态"""
    name = ServiceName.SONARR
    client: SonarrClient

    async def _language_profiles(self) -> dict[int, str]:
        try:
            profiles = await self.client.get_language_profiles()
        except UpstreamError as e:
            # Sonarr v4 已移除语言配置文件，不影响同步
            logger.warning("无法获取 Sonarr 语言配置文件（可能是 v4+），忽略: {}", e)
            return {}
        return {profile.id: profile.name for profile in profiles}

    async def fetch_catalog(self) -> list[SonarrSeriesRecord]:
        profiles = await self._language_profiles()
        now = utcnow()
        records: list[SonarrSeriesRecord] = []

        for series in await self.client.get_all_series():
            episodes = []
            for ep in await self.client.get_episodes(series.id):
                air_date = parse_timestamp(ep.airDateUtc)
                episodes.append(SonarrEpisodeRecord(
                    season_number=ep.seasonNumber,
                    episode_number=ep.episodeNumber,
                    title=ep.title or f"Episode {ep.episodeNumber}",
                    has_file=ep.hasFile,
                    monitored=ep.monitored,
                    has_aired=air_date is not None and air_date <= now,
                ))

            seasons = [
                SonarrSeasonRecord(
                    season_number=season.seasonNumber,
                    monitored=season.monitored,
                    total_episodes=season.statistics.totalEpisodeCount if season.statistics else None,
                    episodes_with_files=season.statistics.episodeFileCount if season.statistics else None,
                )
                for season in series.seasons
            ]

            records.append(SonarrSeriesRecord(
                sonarr_id=series.id,
                title=series.title,
                tvdb_id=str(series.tvdbId) if series.tvdbId else None,
                imdb_id=series.imdbId or None,
                monitored=series.monitored,
                language_profile=profiles.get(series.languageProfileId) if series.languageProfileId is not None else None,
                seasons=seasons,
                episodes=episodes,
            ))

        logger.info("Sonarr 目录拉取完成：{} 部剧集", len(records))
        return records
