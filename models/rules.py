from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CompositionMode(StrEnum):
    AND = "and"
    OR = "or"

class _ConfigModel(BaseModel):
    """配置模型基类，同时接受 snake_case 与 camelCase 键（兼容旧版 rules.json）"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

class RuleToggles(_ConfigModel):
    """全局规则开关"""
    complete_season: bool = True
    language_available: bool = True
    fully_monitored: bool = True

class RuleOverride(_ConfigModel):
    """单个实体的覆盖配置"""
    disabled_rules: list[str] = Field(default_factory=list)
    language_target: str | None = None

class RulesConfig(_ConfigModel):
    """就绪规则配置"""
    rules: RuleToggles = Field(default_factory=RuleToggles)
    language_target: str = "English"
    almost_ready_threshold: float = Field(default=0.8, ge=0, le=1)
    composition_mode: CompositionMode = CompositionMode.AND
    # 键为剧集/电影标题或外部 ID（TVDB / TMDB）
    overrides: dict[str, RuleOverride] = Field(default_factory=dict)
    hide_watched: bool = True

    def override_for(self, title: str, *external_ids: str | None) -> RuleOverride | None:
        """按标题优先、外部 ID 其次查找覆盖配置"""
        if title in self.overrides:
            return self.overrides[title]
        for external_id in external_ids:
            if external_id and external_id in self.overrides:
                return self.overrides[external_id]
        return None

    def to_settings(self) -> dict[str, object]:
        """展开为 settings 表中的扁平键值"""
        return {
            "rules.complete_season": self.rules.complete_season,
            "rules.language_available": self.rules.language_available,
            "rules.fully_monitored": self.rules.fully_monitored,
            "language_target": self.language_target,
            "almost_ready_threshold": self.almost_ready_threshold,
            "composition_mode": self.composition_mode.value,
            "overrides": {key: value.model_dump() for key, value in self.overrides.items()},
            "hide_watched": self.hide_watched,
        }

    @classmethod
    def settings_to_payload(cls, settings: dict[str, object]) -> dict[str, object]:
        """把 settings 表的扁平键值还原为嵌套结构（尚未校验）"""
        payload: dict[str, object] = {}
        toggles = {
            name: settings[f"rules.{name}"]
            for name in RuleToggles.model_fields
            if f"rules.{name}" in settings
        }
        if toggles:
            payload["rules"] = toggles
        for key in ("language_target", "almost_ready_threshold", "composition_mode", "overrides", "hide_watched"):
            if key in settings:
                payload[key] = settings[key]
        return payload
