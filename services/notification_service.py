from collections.abc import Sequence

import httpx
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models.events import EventType, TransitionEvent
from models.orm import Webhook, WebhookType
from models.schemas import WebhookTestResponse
from repositories.notification_log_repo import NotificationLogRepository
from repositories.webhook_repo import WebhookRepository
from services.payload_formatter import PayloadFormatter


def _filter_matches(webhook: Webhook, event_type: EventType) -> bool:
    filters = webhook.filter_model
    if event_type == EventType.READY:
        return filters.on_ready
    return filters.on_almost_ready


class NotificationService:
    """把转变事件投递到已启用的通知端点。

    每个 (media_id, event_type, webhook_id) 只会成功投递一次：
    投递前检查账本，只有收到 2xx 才写入账本，失败的投递留待下次重试。
    任何错误都只记录日志，不会抛给调用方。
    """

    def __init__(self,
                 session_factory: async_sessionmaker[AsyncSession],
                 client: httpx.AsyncClient,
                 formatter: PayloadFormatter,
                 timeout: float = 10.0):
        self.session_factory = session_factory
        self.client = client
        self.formatter = formatter
        self.timeout = timeout

    async def dispatch(self, events: Sequence[TransitionEvent]) -> int:
        """投递事件，返回成功送达的通知数"""
        if not events:
            return 0
        try:
            async with self.session_factory() as session:
                return await self._dispatch(session, events)
        except SQLAlchemyError as e:
            logger.error("通知账本访问失败，本轮通知中止：{}", e)
        except Exception:
            logger.exception("通知分发出现未预期的错误")
        return 0

    async def _dispatch(self, session: AsyncSession, events: Sequence[TransitionEvent]) -> int:
        webhooks = await WebhookRepository(session).get_all_enabled()
        if not webhooks:
            logger.debug("没有启用的通知端点，跳过 {} 个事件", len(events))
            return 0

        # 账本写入失败会回滚会话，端点对象脱离会话以免被过期
        session.expunge_all()
        ledger = NotificationLogRepository(session)
        delivered = 0
        for event in events:
            for webhook in webhooks:
                if not _filter_matches(webhook, event.event_type):
                    continue
                if await ledger.has_sent(event.media_id, event.event_type.value, webhook.id):
                    logger.debug("已通知过，跳过：{} {} -> {}", event.media_title, event.event_type, webhook.name)
                    continue
                if not await self._deliver(webhook, event):
                    continue
                delivered += 1
                try:
                    await ledger.log_sent(event.media_id, event.media_title, event.event_type.value, webhook.id)
                except SQLAlchemyError as e:
                    # 已送达但未记账，下次可能重复通知
                    await session.rollback()
                    logger.error("写入通知账本失败：{} {} -> {}：{}", event.media_title, event.event_type, webhook.name, e)
        return delivered

    async def _deliver(self, webhook: Webhook, event: TransitionEvent) -> bool:
        try:
            if webhook.type == WebhookType.DISCORD:
                payload = await self.formatter.format_discord_embed(event)
            else:
                payload = self.formatter.format_generic_payload(event)
            response = await self.client.post(webhook.url, json=payload, timeout=self.timeout)
        except httpx.TimeoutException:
            logger.error("通知端点 {} 请求超时：{}", webhook.name, event.media_title)
            return False
        except httpx.HTTPError as e:
            logger.error("发送通知到 {} 失败：{}", webhook.name, e)
            return False

        if not response.is_success:
            logger.error("通知端点 {} 返回 {}：{}", webhook.name, response.status_code, event.media_title)
            return False

        logger.info("已发送通知：{} {} -> {}", event.event_type, event.media_title, webhook.name)
        return True

    async def send_test(self, webhook: Webhook) -> WebhookTestResponse:
        """向端点发送一条测试通知，不写入账本"""
        payload = self.formatter.format_test_payload(WebhookType(webhook.type))
        try:
            response = await self.client.post(webhook.url, json=payload, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.warning("测试通知发送到 {} 失败：{}", webhook.name, e)
            return WebhookTestResponse(success=False, error=str(e) or type(e).__name__)

        if not response.is_success:
            logger.warning("测试通知端点 {} 返回 {}", webhook.name, response.status_code)
            return WebhookTestResponse(success=False, status_code=response.status_code,
                                       error=f"HTTP {response.status_code}")
        logger.info("已发送测试通知 -> {}", webhook.name)
        return WebhookTestResponse(success=True, status_code=response.status_code)
