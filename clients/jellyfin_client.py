import httpx

from clients.base_client import BaseClient, list_parser
from models.jellyfin import (BaseItemDto, BaseItemDtoQueryResult,
                             VirtualFolderInfo)


class JellyfinClient(BaseClient):
    """Jellyfin 客户端
    读取媒体库、剧集、季、单集与电影，并支持标记播放状态。
    """
    source_name = "jellyfin"

    def __init__(self, client: httpx.AsyncClient, api_key: str, user_id: str) -> None:
        """初始化 JellyfinClient 实例。

        Args:
            client (httpx.AsyncClient): 异步 HTTP 客户端实例（已设置 base_url 与超时）。
            api_key (str): Jellyfin API 密钥，用于认证请求。
            user_id (str): 用于读取观看状态的 Jellyfin 用户 ID。
        """
        super().__init__(client)
        self._api_key = api_key
        self.user_id = user_id

    def _apply_auth(self):
        return {
            "Authorization": f"MediaBrowser Token={self._api_key}",
            "accept": "application/json",
        }

    async def get_libraries(self) -> list[VirtualFolderInfo]:
        """获取 Jellyfin 的媒体库列表。"""
        return await self.get("/Library/VirtualFolders", parser=list_parser(VirtualFolderInfo))

    async def get_series(self, library_id: str) -> list[BaseItemDto]:
        """获取媒体库中的所有剧集。"""
        params = {
            'ParentId': library_id,
            'IncludeItemTypes': 'Series',
            'Recursive': 'true',
            'Fields': 'ProviderIds,DateCreated,ImageTags,ChildCount',
            'Limit': '10000',
        }
        response = await self.get("/Items", params=params, response_model=BaseItemDtoQueryResult)
        return response.Items

    async def get_seasons(self, series_id: str) -> list[BaseItemDto]:
        """获取剧集的所有季。"""
        params = {'Fields': 'ProviderIds,ChildCount,ImageTags'}
        response = await self.get(f"/Shows/{series_id}/Seasons", params=params, response_model=BaseItemDtoQueryResult)
        return response.Items

    async def get_episodes(self, series_id: str, season_id: str) -> list[BaseItemDto]:
        """获取某一季的所有单集（含媒体流与观看状态）。"""
        params = {
            'SeasonId': season_id,
            'UserId': self.user_id,
            'Fields': 'MediaStreams,ProviderIds,UserData,DateCreated,PremiereDate',
        }
        response = await self.get(f"/Shows/{series_id}/Episodes", params=params, response_model=BaseItemDtoQueryResult)
        return response.Items

    async def get_movies(self, library_id: str) -> list[BaseItemDto]:
        """获取媒体库中的所有电影（含媒体流与观看状态）。"""
        params = {
            'ParentId': library_id,
            'IncludeItemTypes': 'Movie',
            'Recursive': 'true',
            'UserId': self.user_id,
            'Fields': 'MediaStreams,ProviderIds,UserData,DateCreated,ImageTags',
            'Limit': '10000',
        }
        response = await self.get("/Items", params=params, response_model=BaseItemDtoQueryResult)
        return response.Items

    async def mark_played(self, item_id: str) -> None:
        """标记为已观看。"""
        await self.post(f"/Users/{self.user_id}/PlayedItems/{item_id}")

    async def mark_unplayed(self, item_id: str) -> None:
        """标记为未观看。"""
        await self.delete(f"/Users/{self.user_id}/PlayedItems/{item_id}")
