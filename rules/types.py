from collections.abc import Callable

from pydantic import BaseModel, ConfigDict

from models.media import Movie, Season
from models.readiness import RuleResult
from models.rules import RuleOverride, RulesConfig


class RuleContext(BaseModel):
    """规则评估上下文：全局配置 + 当前实体的覆盖配置（可选）"""
    model_config = ConfigDict(frozen=True)

    config: RulesConfig
    override: RuleOverride | None = None

    @property
    def language_target(self) -> str:
        if self.override and self.override.language_target:
            return self.override.language_target
        return self.config.language_target

    def is_disabled(self, rule_name: str) -> bool:
        return bool(self.override and rule_name in self.override.disabled_rules)


SeasonRule = Callable[[Season, RuleContext], RuleResult]
MovieRule = Callable[[Movie, RuleContext], RuleResult]
