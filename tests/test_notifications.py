"""Tests for webhook dispatch and the notification ledger."""
import asyncio
import json

import httpx
from sqlalchemy.exc import OperationalError

from models.events import EventType, MediaType, TransitionEvent
from models.orm import WebhookFilters, WebhookType
from models.readiness import ReadinessStatus
from repositories.notification_log_repo import NotificationLogRepository
from repositories.webhook_repo import WebhookRepository
from services.notification_service import NotificationService
from services.payload_formatter import PayloadFormatter
from tests.helpers import open_database


def _event(event_type=EventType.READY, media_id="show-s1") -> TransitionEvent:
    return TransitionEvent(
        media_id=media_id,
        media_title="The Show",
        media_type=MediaType.SEASON,
        event_type=event_type,
        previous_status=ReadinessStatus.NOT_READY,
        season_number=1,
        episode_current=10,
        episode_total=10,
    )


class Recorder:
    """记录请求并按 URL 返回预设状态码的 MockTransport 处理器"""

    def __init__(self, statuses: dict[str, int] | None = None, fail_with: Exception | None = None):
        self.statuses = statuses or {}
        self.fail_with = fail_with
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with
        return httpx.Response(self.statuses.get(str(request.url), 204))


async def _service(session_factory, recorder: Recorder) -> NotificationService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return NotificationService(session_factory, client, PayloadFormatter(), timeout=1.0)


async def _add_webhook(session_factory, url, webhook_type=WebhookType.GENERIC, **filters):
    async with session_factory() as session:
        return await WebhookRepository(session).add(
            name=url, url=url, webhook_type=webhook_type, filters=WebhookFilters(**filters))


async def _ledger_size(session_factory) -> int:
    async with session_factory() as session:
        return await NotificationLogRepository(session).count()


class TestDispatch:
    def test_same_event_is_delivered_once(self, db_url):
        async def scenario():
            async with open_database(db_url) as sessions:
                await _add_webhook(sessions, "http://hooks.local/generic")
                recorder = Recorder()
                service = await _service(sessions, recorder)

                first = await service.dispatch([_event()])
                second = await service.dispatch([_event()])
                await service.client.aclose()
                return first, second, recorder, await _ledger_size(sessions)

        first, second, recorder, ledger = asyncio.run(scenario())
        assert (first, second) == (1, 0)
        assert len(recorder.requests) == 1
        assert ledger == 1
        body = json.loads(recorder.requests[0].content)
        assert body["event"] == "media.ready"

    def test_failed_delivery_is_retried(self, db_url):
        url = "http://hooks.local/flaky"

        async def scenario():
            async with open_database(db_url) as sessions:
                await _add_webhook(sessions, url)
                recorder = Recorder({url: 500})
                service = await _service(sessions, recorder)

                failed = await service.dispatch([_event()])
                ledger_after_failure = await _ledger_size(sessions)
                recorder.statuses[url] = 200
                retried = await service.dispatch([_event()])
                await service.client.aclose()
                return failed, ledger_after_failure, retried, len(recorder.requests)

        failed, ledger_after_failure, retried, requests = asyncio.run(scenario())
        assert failed == 0
        assert ledger_after_failure == 0
        assert retried == 1
        assert requests == 2

    def test_network_errors_never_propagate(self, db_url):
        async def scenario():
            async with open_database(db_url) as sessions:
                await _add_webhook(sessions, "http://hooks.local/down")
                recorder = Recorder(fail_with=httpx.ConnectTimeout("timed out"))
                service = await _service(sessions, recorder)
                delivered = await service.dispatch([_event()])
                await service.client.aclose()
                return delivered, await _ledger_size(sessions)

        assert asyncio.run(scenario()) == (0, 0)

    def test_filters_and_disabled_webhooks(self, db_url):
        async def scenario():
            async with open_database(db_url) as sessions:
                await _add_webhook(sessions, "http://hooks.local/ready-only")
                await _add_webhook(sessions, "http://hooks.local/both", on_almost_ready=True)
                disabled = await _add_webhook(sessions, "http://hooks.local/off", on_almost_ready=True)
                async with sessions() as session:
                    await WebhookRepository(session).toggle_enabled(disabled.id)

                recorder = Recorder()
                service = await _service(sessions, recorder)
                await service.dispatch([_event(EventType.ALMOST_READY, media_id="m1")])
                await service.client.aclose()
                return [str(r.url) for r in recorder.requests]

        assert asyncio.run(scenario()) == ["http://hooks.local/both"]

    def test_discord_webhook_gets_embed(self, db_url):
        async def scenario():
            async with open_database(db_url) as sessions:
                await _add_webhook(sessions, "http://discord.local/api/webhooks/1", WebhookType.DISCORD)
                recorder = Recorder()
                service = await _service(sessions, recorder)
                await service.dispatch([_event()])
                await service.client.aclose()
                return json.loads(recorder.requests[0].content)

        body = asyncio.run(scenario())
        assert body["embeds"][0]["title"] == "Ready to Watch"

    def test_ledger_is_per_webhook(self, db_url):
        async def scenario():
            async with open_database(db_url) as sessions:
                await _add_webhook(sessions, "http://hooks.local/a")
                recorder = Recorder()
                service = await _service(sessions, recorder)
                await service.dispatch([_event()])
                await _add_webhook(sessions, "http://hooks.local/b")
                await service.dispatch([_event()])
                await service.client.aclose()
                return [str(r.url) for r in recorder.requests]

        assert asyncio.run(scenario()) == ["http://hooks.local/a", "http://hooks.local/b"]

    def test_ledger_write_failure_does_not_stop_other_webhooks(self, db_url, monkeypatch):
        original = NotificationLogRepository.log_sent
        calls = []

        async def flaky_log_sent(self, *args):
            calls.append(args)
            if len(calls) == 1:
                raise OperationalError("INSERT", {}, Exception("database is locked"))
            await original(self, *args)

        monkeypatch.setattr(NotificationLogRepository, "log_sent", flaky_log_sent)

        async def scenario():
            async with open_database(db_url) as sessions:
                await _add_webhook(sessions, "http://hooks.local/a")
                await _add_webhook(sessions, "http://hooks.local/b")
                recorder = Recorder()
                service = await _service(sessions, recorder)
                delivered = await service.dispatch([_event()])
                await service.client.aclose()
                return delivered, [str(r.url) for r in recorder.requests], await _ledger_size(sessions)

        delivered, urls, ledger = asyncio.run(scenario())
        assert delivered == 2
        assert urls == ["http://hooks.local/a", "http://hooks.local/b"]
        assert ledger == 1


class TestNotificationLogRepository:
    def test_duplicate_entries_are_ignored(self, db_url):
        async def scenario():
            async with open_database(db_url) as sessions:
                webhook = await _add_webhook(sessions, "http://hooks.local/a")
                async with sessions() as session:
                    repo = NotificationLogRepository(session)
                    await repo.log_sent("m1", "Movie", "ready", webhook.id)
                    await repo.log_sent("m1", "Movie", "ready", webhook.id)
                    return await repo.has_sent("m1", "ready", webhook.id), await repo.count()

        assert asyncio.run(scenario()) == (True, 1)
