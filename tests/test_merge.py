"""Tests for merging Jellyfin catalog data with Sonarr/Radarr records."""
from models.records import (JellyfinCatalog, RadarrMovieRecord,
                            SonarrEpisodeRecord, SonarrSeasonRecord,
                            SonarrSeriesRecord)
from services.merge_service import merge_catalog, merge_movies, merge_series
from tests.helpers import make_episode, make_movie, make_season, make_series


def _sonarr(title="The Show", *, tvdb_id="100", imdb_id=None, episodes=None, total=None,
            language_profile=None) -> SonarrSeriesRecord:
    episodes = episodes if episodes is not None else []
    return SonarrSeriesRecord(
        sonarr_id=7,
        title=title,
        tvdb_id=tvdb_id,
        imdb_id=imdb_id,
        monitored=True,
        language_profile=language_profile,
        seasons=[SonarrSeasonRecord(season_number=1, monitored=True, total_episodes=total,
                                    episodes_with_files=None)],
        episodes=episodes,
    )


def _sonarr_episode(number, *, has_file=True, has_aired=True, monitored=True):
    return SonarrEpisodeRecord(season_number=1, episode_number=number, title=f"Ep {number}",
                               has_file=has_file, has_aired=has_aired, monitored=monitored)


class TestSeriesMatching:
    def test_match_by_tvdb_id(self):
        series = make_series([make_season([make_episode(1)])], tvdb_id="100", title="Local Title")
        merged = merge_series([series], [_sonarr(title="Other Title")])
        assert merged[0].in_sonarr

    def test_match_by_imdb_id(self):
        series = make_series([make_season([make_episode(1)])], imdb_id="tt1", title="Local Title")
        merged = merge_series([series], [_sonarr(title="Other", tvdb_id=None, imdb_id="tt1")])
        assert merged[0].in_sonarr

    def test_match_by_title_case_insensitive(self):
        series = make_series([make_season([make_episode(1)])], title="the show")
        merged = merge_series([series], [_sonarr(title="The Show", tvdb_id="999")])
        assert merged[0].in_sonarr

    def test_unmatched_series_pass_through(self):
        series = make_series([make_season([make_episode(1)])], title="Alone")
        merged = merge_series([series], [_sonarr(title="Someone Else", tvdb_id="999")])
        assert merged[0] == series
        assert not merged[0].in_sonarr
        assert merged[0].seasons[0].episodes[0].is_monitored is None


class TestFieldMerge:
    def test_flags_are_ored_and_monitoring_taken_from_sonarr(self):
        episode = make_episode(1, has_file=False, has_aired=False)
        series = make_series([make_season([episode])], tvdb_id="100")
        record = _sonarr(episodes=[_sonarr_episode(1, has_file=True, has_aired=True, monitored=False)])

        merged_episode = merge_series([series], [record])[0].seasons[0].episodes[0]

        assert merged_episode.has_file
        assert merged_episode.has_aired
        assert merged_episode.is_monitored is False

    def test_jellyfin_file_flag_survives_sonarr_false(self):
        series = make_series([make_season([make_episode(1, has_file=True)])], tvdb_id="100")
        record = _sonarr(episodes=[_sonarr_episode(1, has_file=False)])
        assert merge_series([series], [record])[0].seasons[0].episodes[0].has_file

    def test_sonarr_total_wins(self):
        series = make_series([make_season([make_episode(1), make_episode(2)])], tvdb_id="100")
        merged = merge_series([series], [_sonarr(total=12)])
        assert merged[0].seasons[0].total_episodes == 12

    def test_total_falls_back_to_episode_count(self):
        series = make_series([make_season([make_episode(1), make_episode(2)], total=8)], tvdb_id="100")
        merged = merge_series([series], [_sonarr(total=None)])
        assert merged[0].seasons[0].total_episodes == 2

    def test_sonarr_only_episodes_become_placeholders(self):
        series = make_series([make_season([make_episode(1), make_episode(3)])], tvdb_id="100")
        record = _sonarr(episodes=[
            _sonarr_episode(1),
            _sonarr_episode(2, has_file=False, has_aired=False),
            _sonarr_episode(3),
        ])

        season = merge_series([series], [record])[0].seasons[0]

        assert [ep.episode_number for ep in season.episodes] == [1, 2, 3]
        placeholder = season.episodes[1]
        assert placeholder.id == "sonarr-7-s1e2"
        assert not placeholder.has_file
        assert placeholder.audio_streams == []
        assert season.available_episodes == 2

    def test_language_profile_from_sonarr(self):
        series = make_series([make_season([make_episode(1)])], tvdb_id="100")
        merged = merge_series([series], [_sonarr(language_profile="English")])
        assert merged[0].language_profile == "English"

    def test_merge_is_idempotent(self):
        series = make_series([make_season([make_episode(1), make_episode(3)])], tvdb_id="100")
        record = _sonarr(total=4, episodes=[
            _sonarr_episode(1, monitored=False),
            _sonarr_episode(2, has_file=False),
            _sonarr_episode(4, has_aired=False, has_file=False),
        ])

        once = merge_series([series], [record])
        twice = merge_series(once, [record])

        assert once == twice


class TestMovieMerge:
    def _record(self, **kwargs):
        data = dict(radarr_id=3, title="The Movie", tmdb_id="550", imdb_id=None,
                    monitored=True, has_file=False, audio_languages=["French"])
        data.update(kwargs)
        return RadarrMovieRecord(**data)

    def test_keeps_jellyfin_streams(self):
        movie = make_movie(tmdb_id="550", languages=("eng",))
        merged = merge_movies([movie], [self._record()])[0]
        assert [s.language for s in merged.audio_streams] == ["eng"]
        assert merged.in_radarr
        assert merged.is_monitored is True
        assert merged.has_file

    def test_supplements_streams_from_radarr(self):
        movie = make_movie(tmdb_id="550", languages=())
        merged = merge_movies([movie], [self._record()])[0]
        assert [s.language for s in merged.audio_streams] == ["French"]

    def test_unmatched_movie_keeps_unknown_monitoring(self):
        movie = make_movie(tmdb_id="1", title="Other")
        merged = merge_movies([movie], [self._record()])[0]
        assert merged.is_monitored is None
        assert not merged.in_radarr

    def test_catalog_merge_is_idempotent(self):
        catalog = JellyfinCatalog(movies=[make_movie(tmdb_id="550", languages=())])
        once = merge_catalog(catalog, [], [self._record()])
        assert merge_catalog(once, [], [self._record()]) == once
