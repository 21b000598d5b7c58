"""规则引擎入口

每条规则都是纯函数 (实体, 上下文) -> RuleResult；这里负责挑选启用的规则、
应用单实体覆盖配置，并把结果折叠为一个 ReadinessVerdict。
"""
from models.media import Movie, Season, Series
from models.readiness import ReadinessStatus, ReadinessVerdict, RuleResult
from models.rules import CompositionMode, RulesConfig
from rules import complete_season, fully_monitored, language_available
from rules.types import MovieRule, RuleContext, SeasonRule

# (规则名, 全局开关字段, 规则函数)
SEASON_RULES: list[tuple[str, str, SeasonRule]] = [
    (complete_season.RULE_NAME, "complete_season", complete_season.complete_season_rule),
    (language_available.RULE_NAME, "language_available", language_available.language_available_season_rule),
    (fully_monitored.RULE_NAME, "fully_monitored", fully_monitored.fully_monitored_rule),
]

MOVIE_RULES: list[tuple[str, str, MovieRule]] = [
    (language_available.RULE_NAME, "language_available", language_available.language_available_movie_rule),
]


def compose_verdict(results: list[RuleResult], mode: CompositionMode, threshold: float) -> ReadinessVerdict:
    """把规则结果折叠为判定。

    - 没有任何启用的规则：ready，规则结果为空；
    - 进度 = Σ分子 / Σ分母，分母和为 0 时视为 1，并截断到 [0, 1]；
    - 组合通过 -> ready；否则进度达到阈值 -> almost-ready；否则 not-ready。
    """
    if not results:
        return ReadinessVerdict(status=ReadinessStatus.READY, rule_results=[], progress_percent=1.0)

    if mode == CompositionMode.AND:
        passed = all(r.passed for r in results)
    else:
        passed = any(r.passed for r in results)

    numerator = sum(r.numerator for r in results)
    denominator = sum(r.denominator for r in results)
    progress = numerator / denominator if denominator > 0 else 1.0
    progress = min(max(progress, 0.0), 1.0)

    if passed:
        status = ReadinessStatus.READY
    elif progress >= threshold:
        status = ReadinessStatus.ALMOST_READY
    else:
        status = ReadinessStatus.NOT_READY
    return ReadinessVerdict(status=status, rule_results=results, progress_percent=progress)


def _run_rules(entity, rules, context: RuleContext) -> list[RuleResult]:
    toggles = context.config.rules
    return [
        rule(entity, context)
        for name, toggle, rule in rules
        if getattr(toggles, toggle) and not context.is_disabled(name)
    ]


def evaluate_season(season: Season, series: Series, config: RulesConfig) -> ReadinessVerdict:
    """评估单季就绪状态，覆盖配置按剧集标题 / TVDB / IMDB 查找"""
    override = config.override_for(series.title, series.tvdb_id, series.imdb_id)
    context = RuleContext(config=config, override=override)
    results = _run_rules(season, SEASON_RULES, context)
    return compose_verdict(results, config.composition_mode, config.almost_ready_threshold)


def evaluate_movie(movie: Movie, config: RulesConfig) -> ReadinessVerdict:
    """评估电影就绪状态（只有语言规则适用）"""
    override = config.override_for(movie.title, movie.tmdb_id, movie.imdb_id)
    context = RuleContext(config=config, override=override)
    results = _run_rules(movie, MOVIE_RULES, context)
    return compose_verdict(results, config.composition_mode, config.almost_ready_threshold)
