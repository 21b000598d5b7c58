from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from models.orm import NotificationLog


class NotificationLogRepository:
    """通知去重账本"""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def has_sent(self, media_id: str, event_type: str, webhook_id: int) -> bool:
        stmt = select(NotificationLog.id).where(
            NotificationLog.media_id == media_id,
            NotificationLog.event_type == event_type,
            NotificationLog.webhook_id == webhook_id,
        ).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def log_sent(self, media_id: str, media_title: str, event_type: str, webhook_id: int) -> None:
        """记录已成功送达的通知；重复记录被忽略"""
        stmt = insert(NotificationLog).values(
            media_id=media_id,
            media_title=media_title,
            event_type=event_type,
            webhook_id=webhook_id,
            sent_at=datetime.now(),
        ).on_conflict_do_nothing(index_elements=['media_id', 'event_type', 'webhook_id'])
        await self.session.execute(stmt)
        await self.session.commit()

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(NotificationLog))
        return result.scalar_one()
