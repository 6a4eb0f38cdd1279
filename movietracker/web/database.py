"""Database models and operations using SQLAlchemy."""

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Text,
    create_engine,
    event,
)
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from movietracker.models import Movie

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class MovieDB(Base):
    """SQLAlchemy model for movies."""

    __tablename__ = "movies"

    # Identifier comes from the remote service, never generated locally
    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String(500), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    image_url = Column(String(500), nullable=False, default="")

    # Local-only status
    is_favorite = Column(Boolean, nullable=False, default=False, index=True)
    is_watched = Column(Boolean, nullable=False, default=False, index=True)

    @classmethod
    def from_movie(cls, movie: Movie) -> "MovieDB":
        return cls(
            id=movie.id,
            title=movie.title,
            year=movie.year,
            image_url=movie.image_url,
            is_favorite=movie.is_favorite,
            is_watched=movie.is_watched,
        )

    def to_movie(self) -> Movie:
        return Movie(
            id=self.id,
            title=self.title,
            year=self.year,
            image_url=self.image_url,
            is_favorite=bool(self.is_favorite),
            is_watched=bool(self.is_watched),
        )


class SyncStatus(Base):
    """Track sync status."""

    __tablename__ = "sync_status"

    id = Column(Integer, primary_key=True)
    last_sync = Column(DateTime, nullable=True)
    movies_count = Column(Integer, default=0)
    status = Column(String(50), default="idle")  # idle, syncing, error
    error_message = Column(Text, nullable=True)


class Database:
    """Database operations.

    Every committed write to the movies table notifies the registered change
    listeners, which is what live queries are built on.
    """

    def __init__(self, db_path: Path = Path("data/movies.db")):
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self.engine = create_engine(f"sqlite:///{db_path}", echo=False)
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

        self._listeners: list[Callable[[], None]] = []
        self._listeners_lock = threading.Lock()
        event.listen(self.SessionLocal, "after_commit", self._after_commit)

    def get_session(self) -> Session:
        return self.SessionLocal()

    # ============== Change notification ==============

    def add_listener(self, listener: Callable[[], None]) -> None:
        """Call `listener` after every commit that touched the movies table."""
        with self._listeners_lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[], None]) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _after_commit(self, session: Session) -> None:
        if not session.info.pop("movies_changed", False):
            return

        with self._listeners_lock:
            listeners = list(self._listeners)

        for listener in listeners:
            # The write is already durable; a broken subscriber must not fail it
            try:
                listener()
            except Exception:
                logger.exception("Movie change listener failed")

    @staticmethod
    def _mark_changed(session: Session) -> None:
        session.info["movies_changed"] = True

    # ============== Reads ==============

    def get_all_movies(self) -> list[Movie]:
        """Get every stored movie in store order."""
        with self.get_session() as session:
            rows = session.query(MovieDB).order_by(MovieDB.id).all()
            return [row.to_movie() for row in rows]

    def get_favorite_movies(self) -> list[Movie]:
        """Get movies flagged as favorite."""
        with self.get_session() as session:
            rows = (
                session.query(MovieDB)
                .filter(MovieDB.is_favorite == True)  # noqa: E712
                .order_by(MovieDB.id)
                .all()
            )
            return [row.to_movie() for row in rows]

    def get_watched_movies(self) -> list[Movie]:
        """Get movies flagged as watched."""
        with self.get_session() as session:
            rows = (
                session.query(MovieDB)
                .filter(MovieDB.is_watched == True)  # noqa: E712
                .order_by(MovieDB.id)
                .all()
            )
            return [row.to_movie() for row in rows]

    def get_movies_by_ids(self, movie_ids: Iterable[int]) -> list[Movie]:
        """Get the stored movies among `movie_ids`, in store order."""
        ids = set(movie_ids)
        if not ids:
            return []
        with self.get_session() as session:
            rows = (
                session.query(MovieDB)
                .filter(MovieDB.id.in_(ids))
                .order_by(MovieDB.id)
                .all()
            )
            return [row.to_movie() for row in rows]

    def get_movie(self, movie_id: int) -> Optional[Movie]:
        """Get a single movie by ID."""
        with self.get_session() as session:
            row = session.get(MovieDB, movie_id)
            return row.to_movie() if row else None

    def count_movies(self) -> int:
        with self.get_session() as session:
            return session.query(MovieDB).count()

    # ============== Writes ==============

    def upsert_movies(self, movies: Iterable[Movie]) -> None:
        """Insert or replace movies by ID in a single transaction."""
        with self.get_session() as session:
            for movie in movies:
                session.merge(MovieDB.from_movie(movie))
            self._mark_changed(session)
            session.commit()

    def upsert_movie(self, movie: Movie) -> None:
        """Insert or replace a single movie by ID."""
        self.upsert_movies([movie])

    def update_favorite_status(self, movie_id: int, is_favorite: bool) -> bool:
        """Set the favorite flag. Returns False if no such movie is stored."""
        return self._update_status(movie_id, is_favorite=is_favorite)

    def update_watched_status(self, movie_id: int, is_watched: bool) -> bool:
        """Set the watched flag. Returns False if no such movie is stored."""
        return self._update_status(movie_id, is_watched=is_watched)

    def _update_status(self, movie_id: int, **values: bool) -> bool:
        with self.get_session() as session:
            updated = (
                session.query(MovieDB)
                .filter(MovieDB.id == movie_id)
                .update(values, synchronize_session=False)
            )
            if updated:
                self._mark_changed(session)
            session.commit()
            return bool(updated)

    def clear(self) -> None:
        """Delete every stored movie."""
        with self.get_session() as session:
            session.query(MovieDB).delete(synchronize_session=False)
            self._mark_changed(session)
            session.commit()

    # ============== Sync status ==============

    def get_sync_status(self) -> SyncStatus:
        """Get sync status."""
        with self.get_session() as session:
            status = session.query(SyncStatus).first()
            if not status:
                status = SyncStatus(movies_count=0, status="idle")
                session.add(status)
                session.commit()
            return status

    def update_sync_status(self, **kwargs) -> None:
        """Update sync status."""
        with self.get_session() as session:
            status = session.query(SyncStatus).first()
            if not status:
                status = SyncStatus()
                session.add(status)

            for key, value in kwargs.items():
                if hasattr(status, key):
                    setattr(status, key, value)

            session.commit()

    def mark_synced(self, movies_count: int) -> None:
        self.update_sync_status(
            last_sync=datetime.utcnow(),
            movies_count=movies_count,
            status="idle",
            error_message=None,
        )
