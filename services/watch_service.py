from loguru import logger

from clients.jellyfin_client import JellyfinClient
from models.sync import ServiceName
from services.snapshot_store import SnapshotStore
from services.source_service import SourceNotConfiguredError


class WatchStateService:
    """标记已看 / 未看：先调用 Jellyfin，成功后乐观更新快照，下一次同步再与上游对齐"""

    def __init__(self, client: JellyfinClient | None, store: SnapshotStore):
        self.client = client
        self.store = store

    async def set_watched(self, item_id: str, watched: bool) -> bool:
        """返回快照中是否找到并更新了该条目。
        Raises:
            SourceNotConfiguredError: Jellyfin 未配置。
            UpstreamError: Jellyfin 调用失败（此时快照不变）。
        """
        if self.client is None:
            raise SourceNotConfiguredError(ServiceName.JELLYFIN)

        if watched:
            await self.client.mark_played(item_id)
        else:
            await self.client.mark_unplayed(item_id)
        logger.info("已在 Jellyfin 中标记 {} 为{}", item_id, "已看" if watched else "未看")
        return self.store.mark_watched(item_id, watched)
