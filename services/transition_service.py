from models.events import EventType, TransitionEvent, VerdictMap
from models.readiness import ReadinessStatus


def _event_type(previous: ReadinessStatus, current: ReadinessStatus) -> EventType | None:
    """只报告向上的转变：-> ready，以及 not-ready -> almost-ready"""
    if current.rank <= previous.rank:
        return None
    if current == ReadinessStatus.READY:
        return EventType.READY
    return EventType.ALMOST_READY


def detect_transitions(previous: VerdictMap | None, current: VerdictMap) -> list[TransitionEvent]:
    """对比两次同步的判定结果，返回就绪等级提升事件。

    previous 为 None（首次同步）时不产生任何事件；
    previous 中不存在的条目视为此前处于 not-ready。
    """
    if previous is None:
        return []

    events = []
    for media_id in sorted(current):
        entry = current[media_id]
        before = previous[media_id].status if media_id in previous else ReadinessStatus.NOT_READY
        event_type = _event_type(before, entry.status)
        if event_type is not None:
            events.append(TransitionEvent.from_entry(entry, event_type, before))
    return events
