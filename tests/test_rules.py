"""Tests for readiness rules and verdict composition."""
import pytest

from models.readiness import ReadinessStatus, RuleResult
from models.rules import CompositionMode, RulesConfig
from rules.complete_season import complete_season_rule
from rules.evaluator import compose_verdict, evaluate_movie, evaluate_season
from rules.fully_monitored import fully_monitored_rule
from rules.language_available import (language_available_movie_rule,
                                      language_available_season_rule)
from rules.languages import normalize_language
from rules.types import RuleContext
from tests.helpers import make_episode, make_movie, make_season, make_series


def _context(**config) -> RuleContext:
    return RuleContext(config=RulesConfig(**config))


class TestLanguageNormalisation:
    @pytest.mark.parametrize("value,expected", [
        ("English", "eng"),
        ("en", "eng"),
        ("ENG", "eng"),
        (" japanese ", "jpn"),
        ("ger", "deu"),
        ("Mandarin", "zho"),
        ("klingon", "klingon"),
    ])
    def test_normalize(self, value, expected):
        assert normalize_language(value) == expected


class TestCompleteSeasonRule:
    def test_all_files_present(self):
        season = make_season([make_episode(n) for n in range(1, 11)])
        result = complete_season_rule(season, _context())
        assert result.passed
        assert (result.numerator, result.denominator) == (10, 10)

    def test_missing_file_counts_available(self):
        season = make_season([make_episode(n) for n in range(1, 10)], total=10)
        result = complete_season_rule(season, _context())
        assert not result.passed
        assert (result.numerator, result.denominator) == (9, 10)

    def test_unaired_episodes_fail_with_aired_numerator(self):
        episodes = [make_episode(n, has_aired=n <= 6, has_file=n <= 4) for n in range(1, 11)]
        result = complete_season_rule(make_season(episodes), _context())
        assert not result.passed
        assert (result.numerator, result.denominator) == (6, 10)
        assert "6/10 episodes aired" in result.detail

    def test_numerator_never_exceeds_total(self):
        season = make_season([make_episode(n) for n in range(1, 13)], total=10)
        result = complete_season_rule(season, _context())
        assert result.passed
        assert result.numerator == 10


class TestLanguageAvailableRule:
    def test_all_episodes_have_target(self):
        season = make_season([make_episode(n, languages=("eng", "jpn")) for n in range(1, 4)])
        result = language_available_season_rule(season, _context(language_target="English"))
        assert result.passed
        assert result.compact_detail == "eng audio"

    def test_partial_language(self):
        episodes = [make_episode(1, languages=("jpn",)), make_episode(2, languages=("eng",))]
        result = language_available_season_rule(make_season(episodes), _context())
        assert not result.passed
        assert (result.numerator, result.denominator) == (1, 2)

    def test_missing_stream_data_is_optimistic(self):
        episodes = [make_episode(1, languages=()), make_episode(2, languages=("en",))]
        result = language_available_season_rule(make_season(episodes), _context())
        assert result.passed
        assert (result.numerator, result.denominator) == (2, 2)

    def test_episodes_without_files_are_ignored(self):
        episodes = [make_episode(1, has_file=False, languages=("jpn",))]
        result = language_available_season_rule(make_season(episodes), _context())
        assert result.passed
        assert (result.numerator, result.denominator) == (0, 0)

    def test_movie_without_streams_passes(self):
        result = language_available_movie_rule(make_movie(languages=()), _context())
        assert result.passed
        assert (result.numerator, result.denominator) == (1, 1)

    def test_movie_language_aliases(self):
        result = language_available_movie_rule(make_movie(languages=("fre",)), _context(language_target="French"))
        assert result.passed

    def test_movie_missing_language(self):
        result = language_available_movie_rule(make_movie(languages=("eng",)), _context(language_target="French"))
        assert not result.passed
        assert (result.numerator, result.denominator) == (0, 1)


class TestFullyMonitoredRule:
    def test_no_monitoring_data_is_vacuous_pass(self):
        season = make_season([make_episode(n) for n in range(1, 4)])
        result = fully_monitored_rule(season, _context())
        assert result.passed
        assert (result.numerator, result.denominator) == (3, 3)

    def test_partially_monitored(self):
        episodes = [make_episode(n, is_monitored=n != 2) for n in range(1, 4)]
        result = fully_monitored_rule(make_season(episodes), _context())
        assert not result.passed
        assert (result.numerator, result.denominator) == (2, 3)


class TestComposeVerdict:
    def test_no_rules_is_ready(self):
        verdict = compose_verdict([], CompositionMode.AND, 0.8)
        assert verdict.status == ReadinessStatus.READY
        assert verdict.rule_results == []
        assert verdict.progress_percent == 1

    def test_zero_denominator_counts_as_complete(self):
        results = [RuleResult(rule_name="x", passed=False, numerator=0, denominator=0, detail="")]
        verdict = compose_verdict(results, CompositionMode.AND, 0.8)
        assert verdict.status == ReadinessStatus.ALMOST_READY
        assert verdict.progress_percent == 1

    def test_or_mode_passes_when_any_rule_passes(self):
        results = [
            RuleResult(rule_name="a", passed=False, numerator=0, denominator=10, detail=""),
            RuleResult(rule_name="b", passed=True, numerator=1, denominator=1, detail=""),
        ]
        assert compose_verdict(results, CompositionMode.OR, 0.8).status == ReadinessStatus.READY
        assert compose_verdict(results, CompositionMode.AND, 0.8).status == ReadinessStatus.NOT_READY


class TestEvaluateSeason:
    def test_nine_of_ten_is_almost_ready(self, rules_config):
        season = make_season([make_episode(n) for n in range(1, 10)], total=10)
        verdict = evaluate_season(season, make_series([season]), rules_config)
        complete = verdict.rule_results[0]
        assert (complete.numerator, complete.denominator, complete.passed) == (9, 10, False)
        assert verdict.progress_percent >= 0.8
        assert verdict.status == ReadinessStatus.ALMOST_READY

    def test_complete_season_is_ready(self, rules_config):
        season = make_season([make_episode(n) for n in range(1, 11)])
        verdict = evaluate_season(season, make_series([season]), rules_config)
        assert verdict.status == ReadinessStatus.READY
        assert verdict.progress_percent == 1

    def test_low_progress_is_not_ready(self, rules_config):
        episodes = [make_episode(n, has_file=n <= 2) for n in range(1, 11)]
        season = make_season(episodes)
        verdict = evaluate_season(season, make_series([season]), rules_config)
        assert verdict.status == ReadinessStatus.NOT_READY
        assert 0 <= verdict.progress_percent < 0.8

    def test_global_toggle_disables_rule(self):
        config = RulesConfig(rules={"complete_season": False})
        season = make_season([make_episode(1)], total=5)
        verdict = evaluate_season(season, make_series([season]), config)
        assert [r.rule_name for r in verdict.rule_results] == ["language-available", "fully-monitored"]
        assert verdict.status == ReadinessStatus.READY

    def test_override_disabling_all_rules_forces_ready(self):
        config = RulesConfig(overrides={
            "The Show": {"disabled_rules": ["complete-season", "language-available", "fully-monitored"]},
        })
        season = make_season([make_episode(1, has_file=False)], total=10)
        verdict = evaluate_season(season, make_series([season]), config)
        assert verdict.status == ReadinessStatus.READY
        assert verdict.rule_results == []

    def test_override_by_external_id_changes_language(self):
        config = RulesConfig.model_validate({
            "languageTarget": "English",
            "overrides": {"81189": {"languageTarget": "Japanese"}},
        })
        season = make_season([make_episode(n, languages=("jpn",)) for n in range(1, 3)])
        series = make_series([season], title="Anime", tvdb_id="81189")
        verdict = evaluate_season(season, series, config)
        assert verdict.status == ReadinessStatus.READY

    def test_and_mode_ready_iff_every_rule_passes(self, rules_config):
        episodes = [make_episode(n, is_monitored=n != 3) for n in range(1, 5)]
        season = make_season(episodes)
        verdict = evaluate_season(season, make_series([season]), rules_config)
        assert not all(r.passed for r in verdict.rule_results)
        assert verdict.status != ReadinessStatus.READY


class TestEvaluateMovie:
    def test_only_language_rule_applies(self, rules_config):
        verdict = evaluate_movie(make_movie(languages=("eng",)), rules_config)
        assert [r.rule_name for r in verdict.rule_results] == ["language-available"]
        assert verdict.status == ReadinessStatus.READY

    def test_movie_override_by_title(self):
        config = RulesConfig(overrides={"The Movie": {"disabled_rules": ["language-available"]}})
        verdict = evaluate_movie(make_movie(languages=("jpn",)), config)
        assert verdict.status == ReadinessStatus.READY
        assert verdict.rule_results == []
