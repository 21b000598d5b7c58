from __future__ import annotations

import json
from datetime import datetime
from enum import StrEnum

from loguru import logger
from pydantic import BaseModel, ValidationError
from sqlalchemy import (DateTime, ForeignKey, Integer, String, Text,
                        UniqueConstraint, text)
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class WebhookType(StrEnum):
    DISCORD = "discord"
    GENERIC = "generic"

class Setting(Base):
    """通用配置键值表，value 为 JSON 文本"""
    __tablename__ = 'settings'

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)

class Webhook(Base):
    """通知端点"""
    __tablename__ = 'webhooks'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    enabled: Mapped[bool] = mapped_column(server_default=text('1'), nullable=False)
    filters: Mapped[str] = mapped_column(
        Text, nullable=False, default='{"on_ready": true, "on_almost_ready": false}')
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    @property
    def filter_model(self) -> WebhookFilters:
        return WebhookFilters.from_db_value(self.filters)

class NotificationLog(Base):
    """通知去重账本：(media_id, event_type, webhook_id) 唯一"""
    __tablename__ = 'notification_log'
    __table_args__ = (
        UniqueConstraint('media_id', 'event_type', 'webhook_id', name='uq_notification_log_dedup'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    media_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    media_title: Mapped[str] = mapped_column(String(512), nullable=False)
    event_type: Mapped[str] = mapped_column(String(16), nullable=False)
    webhook_id: Mapped[int] = mapped_column(ForeignKey('webhooks.id', ondelete='CASCADE'), nullable=False)
    sent_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)

class WebhookFilters(BaseModel):
    """通知端点的事件过滤器"""
    on_ready: bool = True
    on_almost_ready: bool = False

    def to_db_value(self) -> str:
        return json.dumps(self.model_dump())

    @classmethod
    def from_db_value(cls, value: str) -> WebhookFilters:
        try:
            return cls.model_validate(json.loads(value))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error("解析通知过滤器失败: {}。数据: {}", e, value)
            return cls()
