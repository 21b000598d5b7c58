import httpx

from clients.base_client import BaseClient, list_parser
from models.sonarr import (EpisodeResource, LanguageProfileResource,
                           SeriesResource)


class SonarrClient(BaseClient):
    source_name = "sonarr"

    def __init__(self, client: httpx.AsyncClient, api_key: str) -> None:
        super().__init__(client)
        self.api_key = api_key

    def _apply_auth(self):
        return {
            "X-Api-Key": self.api_key,
            "accept": "application/json",
        }

    async def get_all_series(self) -> list[SeriesResource]:
        """获取 Sonarr 中的所有剧集。"""
        return await self.get("/api/v3/series", parser=list_parser(SeriesResource))

    async def get_episodes(self, series_id: int) -> list[EpisodeResource]:
        """根据剧集 ID 获取 Sonarr 中该剧集的所有单集信息。
        Args:
            series_id (int): 剧集 ID。
        """
        params = {'seriesId': series_id}
        return await self.get("/api/v3/episode", params=params, parser=list_parser(EpisodeResource))

    async def get_language_profiles(self) -> list[LanguageProfileResource]:
        """获取语言配置文件（Sonarr v4 已移除该接口）。"""
        return await self.get("/api/v3/languageprofile", parser=list_parser(LanguageProfileResource))
