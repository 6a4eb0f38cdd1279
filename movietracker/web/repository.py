"""Read/write surface over the local store and the synchronizer."""

import logging
from typing import List, Optional

from movietracker.config import Config
from movietracker.models import Movie
from movietracker.sources.movie_api import MovieApiSource
from movietracker.web.database import Database
from movietracker.web.live import LiveQuery
from movietracker.web.sync_service import Synchronizer

logger = logging.getLogger(__name__)


class MovieRepository:
    """Routes callers to the local store (reads, flag updates) or to the
    synchronizer (anything that talks to the remote service)."""

    def __init__(self, database: Database, synchronizer: Synchronizer):
        self.db = database
        self.synchronizer = synchronizer

    # ============== Live reads ==============

    def all_movies(self) -> LiveQuery:
        return LiveQuery(self.db, self.db.get_all_movies, name="all movies")

    def favorite_movies(self) -> LiveQuery:
        return LiveQuery(self.db, self.db.get_favorite_movies, name="favorite movies")

    def watched_movies(self) -> LiveQuery:
        return LiveQuery(self.db, self.db.get_watched_movies, name="watched movies")

    def movie_by_id(self, movie_id: int) -> LiveQuery:
        return LiveQuery(
            self.db, lambda: self.db.get_movie(movie_id), name=f"movie {movie_id}"
        )

    def get_movie(self, movie_id: int) -> Optional[Movie]:
        return self.db.get_movie(movie_id)

    # ============== Writes ==============

    def toggle_favorite(self, movie_id: int, is_favorite: bool) -> bool:
        with self.synchronizer.write_lock:
            found = self.db.update_favorite_status(movie_id, is_favorite)
        if not found:
            logger.warning(f"Cannot set favorite on unknown movie {movie_id}")
        return found

    def toggle_watched(self, movie_id: int, is_watched: bool) -> bool:
        with self.synchronizer.write_lock:
            found = self.db.update_watched_status(movie_id, is_watched)
        if not found:
            logger.warning(f"Cannot set watched on unknown movie {movie_id}")
        return found

    # ============== Remote ==============

    def search(self, query: str) -> List[Movie]:
        return self.synchronizer.search_and_merge(query)

    def refresh(self) -> bool:
        return self.synchronizer.refresh()

    def refresh_movie(self, movie_id: int) -> Optional[Movie]:
        return self.synchronizer.refresh_movie(movie_id)

    def add(self, title: str, year: int) -> Optional[Movie]:
        return self.synchronizer.add_record(title, year)


def build_repository() -> MovieRepository:
    """Wire the store, the movie service client and the synchronizer from Config."""
    database = Database(Config.DATABASE_PATH)
    source = MovieApiSource(Config.API_BASE_URL, timeout=Config.NETWORK_TIMEOUT)
    return MovieRepository(database, Synchronizer(database, source))
