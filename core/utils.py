import re
from datetime import datetime, timezone

from loguru import logger

_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str | None) -> datetime | None:
    """解析上游返回的 ISO 8601 时间（统一为带时区的 UTC）。

    Jellyfin 的时间带 7 位小数秒，这里截断到微秒；无法解析时返回 None。
    """
    if not value:
        return None
    text = _FRACTION_RE.sub(r"\1", value.strip())
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug("无法解析时间: {}", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
