import httpx

from clients.base_client import BaseClient, list_parser
from models.radarr import MovieResource


class RadarrClient(BaseClient):
    source_name = "radarr"

    def __init__(self, client: httpx.AsyncClient, api_key: str):
        super().__init__(client)
        self.api_key = api_key

    def _apply_auth(self):
        return {
            "X-Api-Key": self.api_key,
            "accept": "application/json",
        }

    async def get_all_movies(self) -> list[MovieResource]:
        """获取 Radarr 中的所有电影（含电影文件的语言信息）。"""
        return await self.get("/api/v3/movie", parser=list_parser(MovieResource))
