from datetime import datetime
from pathlib import Path
from typing import Any

from jinja2 import (Environment, FileSystemLoader, TemplateNotFound,
                    select_autoescape)
from loguru import logger

from core.utils import utcnow
from models.events import EventType, MediaType, TransitionEvent
from models.orm import WebhookType

READY_COLOR = 0xf59e0b
ALMOST_READY_COLOR = 0xd97706
FOOTER_TEXT = "wtw"


class PayloadFormatter:
    """把转变事件格式化为 Discord embed 或通用 JSON 事件"""

    def __init__(self, public_url: str = '', template_dir: Path | None = None):
        self.public_url = public_url.rstrip('/')

        self.template_dir = template_dir or Path.cwd() / "templates"
        if not self.template_dir.exists():
            self.template_dir = Path(__file__).parent.parent / "templates"
        if not self.template_dir.exists():
            logger.warning("未在以下位置找到通知模板目录：{}", self.template_dir)

        self.jinja_env = Environment(
            loader=FileSystemLoader(self.template_dir),
            autoescape=select_autoescape(['html', 'xml']),
            enable_async=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    async def _render(self, template_name: str, context: dict[str, Any]) -> str | None:
        try:
            template = self.jinja_env.get_template(template_name)
            return (await template.render_async(context)).strip()
        except TemplateNotFound:
            logger.info("缺少通知模板文件：{}", template_name)
            return None
        except Exception as e:
            logger.error("渲染模板 {} 时出错：{}", template_name, e)
            return None

    def thumbnail_url(self, poster_image_id: str | None) -> str | None:
        if not poster_image_id or not self.public_url:
            return None
        return f"{self.public_url}/Items/{poster_image_id}/Images/Primary?maxWidth=256"

    async def format_discord_embed(self, event: TransitionEvent, timestamp: datetime | None = None) -> dict[str, Any]:
        """Discord webhook embed 负载"""
        is_ready = event.event_type == EventType.READY
        context = event.model_dump()

        description = await self._render("discord_description.j2", context)
        if not description:
            description = f"**{event.media_title}**"

        fields = []
        if event.episode_current is not None and event.episode_total is not None:
            fields.append({
                "name": "Episodes",
                "value": f"{event.episode_current}/{event.episode_total}",
                "inline": True,
            })
        if event.rule_results:
            summary = await self._render("discord_rules.j2", context)
            if summary:
                fields.append({"name": "Rules", "value": summary, "inline": False})

        embed: dict[str, Any] = {
            "title": "Ready to Watch" if is_ready else "Almost Ready",
            "description": description,
            "color": READY_COLOR if is_ready else ALMOST_READY_COLOR,
            "footer": {"text": FOOTER_TEXT},
            "timestamp": (timestamp or utcnow()).isoformat(),
        }
        if fields:
            embed["fields"] = fields
        thumbnail = self.thumbnail_url(event.poster_image_id)
        if thumbnail:
            embed["thumbnail"] = {"url": thumbnail}
        return {"embeds": [embed]}

    @staticmethod
    def format_generic_payload(event: TransitionEvent, timestamp: datetime | None = None) -> dict[str, Any]:
        """通用 JSON 事件：{event, media, verdict, timestamp}"""
        media: dict[str, Any] = {
            "id": event.media_id,
            "title": event.media_title,
            "type": event.media_type.value,
        }
        if event.media_type == MediaType.SEASON and event.season_number is not None:
            media["seasonNumber"] = event.season_number
        if event.episode_current is not None and event.episode_total is not None:
            media["progress"] = {"current": event.episode_current, "total": event.episode_total}

        verdict: dict[str, Any] = {
            "status": event.event_type.value,
            "previousStatus": event.previous_status.value,
        }
        if event.rule_results:
            verdict["ruleResults"] = [
                {
                    "ruleName": r.rule_name,
                    "passed": r.passed,
                    "detail": r.detail,
                    "numerator": r.numerator,
                    "denominator": r.denominator,
                }
                for r in event.rule_results
            ]

        return {
            "event": f"media.{event.event_type.value}",
            "media": media,
            "verdict": verdict,
            "timestamp": (timestamp or utcnow()).isoformat(),
        }

    @staticmethod
    def format_test_payload(webhook_type: WebhookType, timestamp: datetime | None = None) -> dict[str, Any]:
        """测试通知负载，不对应任何真实条目"""
        sent_at = (timestamp or utcnow()).isoformat()
        if webhook_type == WebhookType.DISCORD:
            return {"embeds": [{
                "title": "[TEST] Ready to Watch",
                "description": "**Test Series** - Season 1\nThis is a test notification from wtw.",
                "color": READY_COLOR,
                "footer": {"text": f"{FOOTER_TEXT} - test notification"},
                "timestamp": sent_at,
            }]}
        return {
            "event": "test",
            "media": {
                "id": "test-item",
                "title": "Test Series",
                "type": MediaType.SEASON.value,
                "seasonNumber": 1,
                "progress": {"current": 10, "total": 10},
            },
            "verdict": {"status": "ready"},
            "timestamp": sent_at,
        }
