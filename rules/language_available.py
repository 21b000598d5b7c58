from models.media import Movie, Season
from models.readiness import RuleResult
from rules.languages import language_matches, normalize_language
from rules.types import RuleContext

RULE_NAME = "language-available"


def language_available_season_rule(season: Season, context: RuleContext) -> RuleResult:
    """每个有文件的剧集都包含目标语言音轨。
    没有任何音轨信息的剧集按通过处理。
    """
    target = context.language_target
    code = normalize_language(target)

    total = 0
    with_language = 0
    for episode in season.episodes:
        if not episode.has_file:
            continue
        total += 1
        if not episode.audio_streams or any(
            language_matches(stream.language, target) for stream in episode.audio_streams
        ):
            with_language += 1

    if total == 0:
        return RuleResult(
            rule_name=RULE_NAME,
            passed=True,
            numerator=0,
            denominator=0,
            detail="No episodes to check",
        )

    passed = with_language >= total
    return RuleResult(
        rule_name=RULE_NAME,
        passed=passed,
        numerator=with_language,
        denominator=total,
        detail=f"All {total} episodes have {target} audio" if passed
        else f"{with_language}/{total} episodes have {target} audio",
        compact_detail=f"{code} audio" if passed else f"{with_language}/{total} {code} audio",
    )


def language_available_movie_rule(movie: Movie, context: RuleContext) -> RuleResult:
    target = context.language_target
    code = normalize_language(target)

    if not movie.audio_streams:
        return RuleResult(
            rule_name=RULE_NAME,
            passed=True,
            numerator=1,
            denominator=1,
            detail="No audio stream data available",
            compact_detail=f"{code} audio",
        )

    found = any(language_matches(stream.language, target) for stream in movie.audio_streams)
    return RuleResult(
        rule_name=RULE_NAME,
        passed=found,
        numerator=1 if found else 0,
        denominator=1,
        detail=f"{target} audio available" if found else f"{target} audio not available",
        compact_detail=f"{code} audio" if found else f"{code} audio not available",
    )
