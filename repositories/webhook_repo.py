from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.orm import NotificationLog, Webhook, WebhookFilters, WebhookType


class WebhookRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, name: str, url: str, webhook_type: WebhookType,
                  filters: WebhookFilters | None = None, enabled: bool = True) -> Webhook:
        """添加通知端点"""
        webhook = Webhook(
            name=name,
            url=url,
            type=webhook_type.value,
            enabled=enabled,
            filters=(filters or WebhookFilters()).to_db_value(),
        )
        self.session.add(webhook)
        await self.session.commit()
        await self.session.refresh(webhook)
        return webhook

    async def get_all(self) -> Sequence[Webhook]:
        result = await self.session.execute(select(Webhook).order_by(Webhook.id))
        return result.scalars().all()

    async def get_all_enabled(self) -> Sequence[Webhook]:
        """获取已启用的通知端点"""
        stmt = select(Webhook).where(Webhook.enabled.is_(True)).order_by(Webhook.id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_by_id(self, webhook_id: int) -> Webhook | None:
        return await self.session.get(Webhook, webhook_id)

    async def delete(self, webhook_id: int) -> None:
        """删除通知端点及其去重记录"""
        webhook = await self.get_by_id(webhook_id)
        if webhook:
            await self.session.execute(delete(NotificationLog).where(NotificationLog.webhook_id == webhook_id))
            await self.session.delete(webhook)
            await self.session.commit()

    async def toggle_enabled(self, webhook_id: int) -> Webhook | None:
        """切换启用/禁用状态"""
        webhook = await self.get_by_id(webhook_id)
        if webhook:
            webhook.enabled = not webhook.enabled
            await self.session.commit()
            await self.session.refresh(webhook)
        return webhook
