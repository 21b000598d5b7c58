from models.media import Season
from models.readiness import RuleResult
from rules.types import RuleContext

RULE_NAME = "fully-monitored"


def fully_monitored_rule(season: Season, context: RuleContext) -> RuleResult:
    """季内所有剧集都被追踪服务监控。
    没有任何监控信息时（追踪服务未配置或不可用）视为通过。
    """
    total = len(season.episodes)
    if all(ep.is_monitored is None for ep in season.episodes):
        return RuleResult(
            rule_name=RULE_NAME,
            passed=True,
            numerator=total,
            denominator=total,
            detail="No monitoring data, rule skipped",
        )

    monitored = sum(1 for ep in season.episodes if ep.is_monitored is True)
    passed = monitored >= total
    return RuleResult(
        rule_name=RULE_NAME,
        passed=passed,
        numerator=monitored,
        denominator=total,
        detail=f"All {total} episodes monitored" if passed else f"{monitored}/{total} episodes monitored",
        compact_detail="monitored" if passed else f"{monitored}/{total} monitored",
    )
