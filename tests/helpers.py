"""测试用的实体工厂与数据库辅助函数"""
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,
                                    create_async_engine)

from core.database import create_tables
from models.media import AudioStream, Episode, Movie, Season, Series


def make_episode(number: int, *, series_id: str = "show", season: int = 1,
                 has_file: bool = True, has_aired: bool = True,
                 is_monitored: bool | None = None, languages: tuple[str, ...] = ("eng",),
                 is_watched: bool = False, progress: float | None = None,
                 episode_id: str | None = None) -> Episode:
    return Episode(
        id=episode_id or f"{series_id}-s{season}e{number}",
        series_id=series_id,
        title=f"Episode {number}",
        season_number=season,
        episode_number=number,
        has_file=has_file,
        has_aired=has_aired,
        is_monitored=is_monitored,
        is_watched=is_watched,
        playback_progress=progress,
        audio_streams=[AudioStream(language=lang) for lang in languages],
    )


def make_season(episodes: list[Episode], *, number: int = 1, total: int | None = None,
                series_id: str = "show") -> Season:
    return Season(
        series_id=series_id,
        season_number=number,
        title=f"Season {number}",
        total_episodes=total if total is not None else len(episodes),
        available_episodes=sum(1 for ep in episodes if ep.has_file),
        aired_episodes=sum(1 for ep in episodes if ep.has_aired),
        episodes=episodes,
    )


def make_series(seasons: list[Season], *, series_id: str = "show", title: str = "The Show",
                tvdb_id: str | None = None, imdb_id: str | None = None) -> Series:
    return Series(
        id=series_id,
        title=title,
        tvdb_id=tvdb_id,
        imdb_id=imdb_id,
        poster_image_id=series_id,
        seasons=seasons,
    )


def make_movie(movie_id: str = "movie", *, title: str = "The Movie", languages: tuple[str, ...] = ("eng",),
               tmdb_id: str | None = None, imdb_id: str | None = None, has_file: bool = True,
               is_watched: bool = False) -> Movie:
    return Movie(
        id=movie_id,
        title=title,
        tmdb_id=tmdb_id,
        imdb_id=imdb_id,
        has_file=has_file,
        is_watched=is_watched,
        audio_streams=[AudioStream(language=lang) for lang in languages],
    )


@asynccontextmanager
async def open_database(url: str):
    """为单个测试创建独立的 sqlite 数据库，返回 session 工厂"""
    engine = create_async_engine(url)
    await create_tables(engine)
    try:
        yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()
