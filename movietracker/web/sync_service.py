"""Synchronization between the remote movie service and the local store."""

import logging
import threading
from typing import Iterable, List, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.exc import SQLAlchemyError

from movietracker.models import Movie, RemoteMovie
from movietracker.sources.base import BaseSource
from movietracker.web.database import Database

logger = logging.getLogger(__name__)


class Synchronizer:
    """Merges remote movie data into the local store.

    Title, year and image always follow the remote service. Favorite and
    watched flags are local-only and carried forward from whatever the store
    held for the same identifier, or default to False.

    Snapshot-then-write sequences and flag updates all run under
    `write_lock`, so a flag toggled in the meantime is never overwritten by a
    stale snapshot. Only one full refresh runs at a time.
    """

    def __init__(self, database: Database, source: BaseSource):
        self.db = database
        self.source = source
        self.scheduler = BackgroundScheduler()
        self.write_lock = threading.RLock()
        self._refresh_guard = threading.Lock()

    # ============== Scheduling ==============

    def start(self, interval_minutes: int) -> None:
        """Start refreshing in the background every `interval_minutes`."""
        self.scheduler.add_job(
            self._scheduled_refresh,
            "interval",
            minutes=interval_minutes,
            id="refresh_movies",
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info(f"Sync scheduler started (interval: {interval_minutes} min)")

    def stop(self) -> None:
        """Stop the sync scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Sync scheduler stopped")

    def _scheduled_refresh(self) -> None:
        if not self._refresh_guard.acquire(blocking=False):
            logger.warning("Refresh already in progress, skipping")
            return
        try:
            self._refresh()
        finally:
            self._refresh_guard.release()

    @property
    def is_syncing(self) -> bool:
        return self._refresh_guard.locked()

    # ============== Merge ==============

    def _merge(self, remote_movies: Iterable[RemoteMovie]) -> List[Movie]:
        """Attach the locally stored flags to freshly fetched movies."""
        flags = {
            movie.id: (movie.is_favorite, movie.is_watched)
            for movie in self.db.get_all_movies()
        }
        return [
            remote.to_movie(*flags.get(remote.id, (False, False)))
            for remote in remote_movies
        ]

    def _merge_and_store(self, remote_movies: List[RemoteMovie]) -> List[Movie]:
        with self.write_lock:
            merged = self._merge(remote_movies)
            if merged:
                self.db.upsert_movies(merged)
        return merged

    # ============== Operations ==============

    def reconcile(self, remote_movies: List[RemoteMovie]) -> bool:
        """Merge a full remote listing into the store.

        Returns False if the store write failed; nothing is written then.
        Movies stored locally but missing remotely are kept.
        """
        try:
            merged = self._merge_and_store(remote_movies)
        except Exception as e:
            logger.error(f"Failed to store {len(remote_movies)} movies: {e}")
            return False

        logger.info(f"Reconciled {len(merged)} movies")
        return True

    def refresh(self) -> bool:
        """Fetch every movie from the remote service and reconcile it.

        Waits for a refresh already running to finish first.
        """
        with self._refresh_guard:
            return self._refresh()

    def refresh_in_background(self) -> bool:
        """Start a refresh on a daemon thread.

        Returns False without starting anything if a refresh is running.
        """
        if not self._refresh_guard.acquire(blocking=False):
            return False

        def run() -> None:
            try:
                self._refresh()
            finally:
                self._refresh_guard.release()

        threading.Thread(target=run, daemon=True).start()
        return True

    def _refresh(self) -> bool:
        logger.info(f"Refreshing movies from {self.source.name}...")

        try:
            self.db.update_sync_status(status="syncing", error_message=None)
            remote_movies = self.source.get_all_movies()
        except Exception as e:
            logger.error(f"Refresh failed: {e}")
            self._record_failure(str(e))
            return False

        if not self.reconcile(remote_movies):
            self._record_failure("Could not store fetched movies")
            return False

        try:
            self.db.mark_synced(len(remote_movies))
        except SQLAlchemyError as e:
            logger.error(f"Could not record sync status: {e}")

        logger.info(f"Refresh complete: {len(remote_movies)} movies")
        return True

    def _record_failure(self, message: str) -> None:
        try:
            self.db.update_sync_status(status="error", error_message=message)
        except SQLAlchemyError as e:
            logger.error(f"Could not record sync failure: {e}")

    def search_and_merge(self, query: str) -> List[Movie]:
        """Search remotely, merge the hits into the store and return them.

        The result holds exactly the movies the remote search returned, with
        their local flags. Remote and storage errors propagate.
        """
        remote_movies = self.source.search_movies(query)
        self._merge_and_store(remote_movies)
        return self.db.get_movies_by_ids(remote.id for remote in remote_movies)

    def refresh_movie(self, movie_id: int) -> Optional[Movie]:
        """Re-fetch a single movie and merge it. Errors propagate."""
        remote = self.source.get_movie(movie_id)
        self._merge_and_store([remote])
        return self.db.get_movie(remote.id)

    def add_record(self, title: str, year: int) -> Optional[Movie]:
        """Create a movie remotely and store the canonical record.

        Returns None if the remote call or the store write failed.
        """
        try:
            movie = self.source.add_movie(title, year).to_movie()
            with self.write_lock:
                self.db.upsert_movie(movie)
        except Exception as e:
            logger.error(f"Failed to add '{title}' ({year}): {e}")
            return None

        return movie
