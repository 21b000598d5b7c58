from models.media import Season
from models.readiness import RuleResult
from rules.types import RuleContext

RULE_NAME = "complete-season"


def complete_season_rule(season: Season, context: RuleContext) -> RuleResult:
    """所有预期剧集都已播出且有文件。

    尚未全部播出时直接判定失败，分子取已播出集数；
    否则分子取有文件的集数。
    """
    total = season.total_episodes
    available = sum(1 for ep in season.episodes if ep.has_file)
    aired = sum(1 for ep in season.episodes if ep.has_aired)

    if aired < len(season.episodes):
        return RuleResult(
            rule_name=RULE_NAME,
            passed=False,
            numerator=min(aired, total),
            denominator=total,
            detail=f"{aired}/{total} episodes aired, {available} available",
            compact_detail=f"{aired}/{total} aired",
        )

    passed = available >= total
    return RuleResult(
        rule_name=RULE_NAME,
        passed=passed,
        numerator=min(available, total),
        denominator=total,
        detail=f"All {total} episodes available" if passed else f"{available}/{total} episodes available",
        compact_detail="complete" if passed else f"{available}/{total} episodes",
    )
