from __future__ import annotations

import sys
from pathlib import Path
from typing import List

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from movietracker.models import RemoteMovie  # noqa: E402
from movietracker.sources.base import BaseSource  # noqa: E402
from movietracker.sources.movie_api import MovieApiError  # noqa: E402
from movietracker.web.database import Database  # noqa: E402
from movietracker.web.repository import MovieRepository  # noqa: E402
from movietracker.web.sync_service import Synchronizer  # noqa: E402


class FakeSource(BaseSource):
    """In-memory movie service. Set `fail = True` to make every call raise."""

    def __init__(self, movies: List[RemoteMovie] | None = None):
        self.movies = {m.id: m for m in (movies or [])}
        self.fail = False
        self.search_calls: List[str] = []
        self.next_id = 100

    @property
    def name(self) -> str:
        return "Fake"

    def test_connection(self) -> bool:
        return not self.fail

    def _check(self) -> None:
        if self.fail:
            raise MovieApiError("movie service unreachable")

    def get_all_movies(self) -> List[RemoteMovie]:
        self._check()
        return list(self.movies.values())

    def search_movies(self, query: str) -> List[RemoteMovie]:
        self.search_calls.append(query)
        self._check()
        return [m for m in self.movies.values() if query.lower() in m.title.lower()]

    def get_movie(self, movie_id: int) -> RemoteMovie:
        self._check()
        if movie_id not in self.movies:
            raise MovieApiError(f"GET movies/{movie_id} failed: 404")
        return self.movies[movie_id]

    def add_movie(self, title: str, year: int) -> RemoteMovie:
        self._check()
        movie = RemoteMovie(self.next_id, title, year, f"https://img.example/{self.next_id}.jpg")
        self.next_id += 1
        self.movies[movie.id] = movie
        return movie


def remote(movie_id: int, title: str, year: int = 2000, image_url: str = "") -> RemoteMovie:
    return RemoteMovie(movie_id, title, year, image_url or f"https://img.example/{movie_id}.jpg")


@pytest.fixture()
def database(tmp_path: Path) -> Database:
    db = Database(tmp_path / "movies.db")
    yield db
    db.engine.dispose()


@pytest.fixture()
def source() -> FakeSource:
    return FakeSource(
        [
            remote(1, "Cats"),
            remote(2, "Catch Me If You Can", 2002),
            remote(3, "Heat", 1995),
        ]
    )


@pytest.fixture()
def synchronizer(database: Database, source: FakeSource) -> Synchronizer:
    sync = Synchronizer(database, source)
    yield sync
    sync.stop()


@pytest.fixture()
def repository(database: Database, synchronizer: Synchronizer) -> MovieRepository:
    return MovieRepository(database, synchronizer)
