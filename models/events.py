from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from models.readiness import ReadinessStatus, RuleResult


class MediaType(StrEnum):
    SEASON = "season"
    MOVIE = "movie"

class EventType(StrEnum):
    """通知事件类型，只包含向上的转变"""
    READY = "ready"
    ALMOST_READY = "almost-ready"

class VerdictEntry(BaseModel):
    """判定结果中与通知相关的扁平投影，以稳定的 media_id 为键"""
    model_config = ConfigDict(frozen=True)

    media_id: str
    media_title: str
    media_type: MediaType
    status: ReadinessStatus
    season_number: int | None = None
    episode_current: int | None = None
    episode_total: int | None = None
    poster_image_id: str | None = None
    rule_results: list[RuleResult] = Field(default_factory=list)

VerdictMap = dict[str, VerdictEntry]

class TransitionEvent(BaseModel):
    """两次同步之间检测到的就绪等级提升"""
    model_config = ConfigDict(frozen=True)

    media_id: str
    media_title: str
    media_type: MediaType
    event_type: EventType
    previous_status: ReadinessStatus
    season_number: int | None = None
    episode_current: int | None = None
    episode_total: int | None = None
    poster_image_id: str | None = None
    rule_results: list[RuleResult] = Field(default_factory=list)

    @classmethod
    def from_entry(cls, entry: VerdictEntry, event_type: EventType,
                   previous_status: ReadinessStatus) -> 'TransitionEvent':
        data = entry.model_dump(exclude={'status'})
        return cls(**data, event_type=event_type, previous_status=previous_status)
