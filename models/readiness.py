from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ReadinessStatus(StrEnum):
    """就绪等级，顺序为 NOT_READY < ALMOST_READY < READY"""
    READY = "ready"
    ALMOST_READY = "almost-ready"
    NOT_READY = "not-ready"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]

_STATUS_RANK = {
    ReadinessStatus.NOT_READY: 0,
    ReadinessStatus.ALMOST_READY: 1,
    ReadinessStatus.READY: 2,
}

class RuleResult(BaseModel):
    """单条规则的评估结果。denominator 为 0 表示没有可评估的单元。"""
    model_config = ConfigDict(frozen=True)

    rule_name: str
    passed: bool
    numerator: int = Field(ge=0)
    denominator: int = Field(ge=0)
    detail: str
    compact_detail: str = ""

class ReadinessVerdict(BaseModel):
    """就绪判定，每次根据当前实体与当前配置重新计算，不持久化"""
    model_config = ConfigDict(frozen=True)

    status: ReadinessStatus
    rule_results: list[RuleResult] = Field(default_factory=list)
    progress_percent: float = Field(ge=0, le=1)
