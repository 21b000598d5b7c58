"""Tests for Discord and generic webhook payload formatting."""
import asyncio
from datetime import datetime, timezone

from models.events import EventType, MediaType, TransitionEvent
from models.orm import WebhookType
from models.readiness import ReadinessStatus, RuleResult
from services.payload_formatter import (ALMOST_READY_COLOR, READY_COLOR,
                                        PayloadFormatter)

NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

RULES = [
    RuleResult(rule_name="complete-season", passed=True, numerator=10, denominator=10,
               detail="All 10 episodes available"),
    RuleResult(rule_name="language-available", passed=False, numerator=8, denominator=10,
               detail="8/10 episodes have English audio"),
]


def _season_event(event_type=EventType.READY, **kwargs) -> TransitionEvent:
    data = dict(
        media_id="show-s2",
        media_title="The Show",
        media_type=MediaType.SEASON,
        event_type=event_type,
        previous_status=ReadinessStatus.NOT_READY,
        season_number=2,
        episode_current=10,
        episode_total=10,
        poster_image_id="show",
        rule_results=RULES,
    )
    data.update(kwargs)
    return TransitionEvent(**data)


def _movie_event() -> TransitionEvent:
    return TransitionEvent(
        media_id="movie-1",
        media_title="The Movie",
        media_type=MediaType.MOVIE,
        event_type=EventType.ALMOST_READY,
        previous_status=ReadinessStatus.NOT_READY,
    )


class TestDiscordEmbed:
    def test_season_ready_embed(self):
        formatter = PayloadFormatter(public_url="http://jellyfin.local/")
        payload = asyncio.run(formatter.format_discord_embed(_season_event(), timestamp=NOW))

        embed = payload["embeds"][0]
        assert embed["title"] == "Ready to Watch"
        assert embed["color"] == READY_COLOR
        assert embed["description"] == "**The Show** - Season 2\n10/10 episodes available"
        assert embed["footer"] == {"text": "wtw"}
        assert embed["timestamp"] == NOW.isoformat()
        assert embed["thumbnail"]["url"] == "http://jellyfin.local/Items/show/Images/Primary?maxWidth=256"

        fields = {f["name"]: f for f in embed["fields"]}
        assert fields["Episodes"]["value"] == "10/10"
        assert fields["Rules"]["value"].splitlines() == [
            "✅ complete-season: All 10 episodes available",
            "❌ language-available: 8/10 episodes have English audio",
        ]

    def test_movie_almost_ready_embed(self):
        formatter = PayloadFormatter()
        payload = asyncio.run(formatter.format_discord_embed(_movie_event(), timestamp=NOW))

        embed = payload["embeds"][0]
        assert embed["title"] == "Almost Ready"
        assert embed["color"] == ALMOST_READY_COLOR
        assert embed["description"] == "**The Movie**"
        assert "fields" not in embed
        assert "thumbnail" not in embed

    def test_missing_templates_fall_back_to_title(self, tmp_path):
        formatter = PayloadFormatter(template_dir=tmp_path)
        payload = asyncio.run(formatter.format_discord_embed(_season_event(), timestamp=NOW))
        embed = payload["embeds"][0]
        assert embed["description"] == "**The Show**"
        assert [f["name"] for f in embed["fields"]] == ["Episodes"]


class TestGenericPayload:
    def test_season_envelope(self):
        payload = PayloadFormatter.format_generic_payload(_season_event(), timestamp=NOW)

        assert payload["event"] == "media.ready"
        assert payload["media"] == {
            "id": "show-s2",
            "title": "The Show",
            "type": "season",
            "seasonNumber": 2,
            "progress": {"current": 10, "total": 10},
        }
        assert payload["verdict"]["status"] == "ready"
        assert payload["verdict"]["previousStatus"] == "not-ready"
        assert payload["verdict"]["ruleResults"][1] == {
            "ruleName": "language-available",
            "passed": False,
            "detail": "8/10 episodes have English audio",
            "numerator": 8,
            "denominator": 10,
        }
        assert payload["timestamp"] == NOW.isoformat()

    def test_movie_envelope_omits_optional_fields(self):
        payload = PayloadFormatter.format_generic_payload(_movie_event(), timestamp=NOW)
        assert payload["event"] == "media.almost-ready"
        assert payload["media"] == {"id": "movie-1", "title": "The Movie", "type": "movie"}
        assert "ruleResults" not in payload["verdict"]


class TestTestPayload:
    def test_discord(self):
        payload = PayloadFormatter.format_test_payload(WebhookType.DISCORD, timestamp=NOW)
        embed = payload["embeds"][0]
        assert embed["title"] == "[TEST] Ready to Watch"
        assert embed["color"] == READY_COLOR
        assert embed["footer"] == {"text": "wtw - test notification"}
        assert embed["timestamp"] == NOW.isoformat()

    def test_generic(self):
        payload = PayloadFormatter.format_test_payload(WebhookType.GENERIC, timestamp=NOW)
        assert payload["event"] == "test"
        assert payload["media"]["type"] == "season"
        assert payload["verdict"] == {"status": "ready"}
