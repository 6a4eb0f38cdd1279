"""View-models holding screen state for the movie lists, detail and search."""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Coroutine, Optional

from movietracker.config import Config
from movietracker.models import Movie
from movietracker.web.live import LiveQuery
from movietracker.web.repository import MovieRepository
from movietracker.web.state import IDLE, LOADING, Error, Success, UiState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShowError:
    """One-time event asking the UI to show an error message."""

    message: str


class BaseViewModel:
    """Holds the current state, an event queue and the tasks it launched.

    Must be used from a running event loop. Blocking repository calls are
    pushed to worker threads.
    """

    def __init__(self, repository: MovieRepository):
        self.repository = repository
        self.state = self.initial_state()
        self.events: asyncio.Queue = asyncio.Queue()
        self._tasks: set[asyncio.Task] = set()

    def initial_state(self) -> Any:
        raise NotImplementedError

    def set_state(self, **changes: Any) -> None:
        self.state = replace(self.state, **changes)

    def emit_event(self, event: ShowError) -> None:
        self.events.put_nowait(event)

    def launch(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def toggle_favorite(self, movie: Movie) -> asyncio.Task:
        return self.launch(
            asyncio.to_thread(self.repository.toggle_favorite, movie.id, not movie.is_favorite)
        )

    def toggle_watched(self, movie: Movie) -> asyncio.Task:
        return self.launch(
            asyncio.to_thread(self.repository.toggle_watched, movie.id, not movie.is_watched)
        )

    async def close(self) -> None:
        """Cancel everything still running and wait for it to finish."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


# ============== Movie lists ==============


@dataclass(frozen=True)
class MovieListState:
    movies: UiState = IDLE


class MovieListViewModel(BaseViewModel):
    """Follows a live movie list. `load_movies` doubles as the retry action."""

    label = "movies"

    def __init__(self, repository: MovieRepository):
        super().__init__(repository)
        self._load_job: Optional[asyncio.Task] = None

    def initial_state(self) -> MovieListState:
        return MovieListState()

    def live_query(self) -> LiveQuery:
        return self.repository.all_movies()

    def load_movies(self) -> asyncio.Task:
        if self._load_job is not None:
            self._load_job.cancel()
        self._load_job = self.launch(self._collect())
        return self._load_job

    async def _collect(self) -> None:
        self.set_state(movies=LOADING)
        try:
            async for movies in self.live_query().stream():
                self.set_state(movies=Success(movies))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Failed to load {self.label}: {e}")
            self.set_state(movies=Error(str(e) or "Unknown error"))
            self.emit_event(ShowError(f"Failed to load {self.label}"))


class HomeViewModel(MovieListViewModel):
    label = "movies"


class FavoritesViewModel(MovieListViewModel):
    label = "favorite movies"

    def live_query(self) -> LiveQuery:
        return self.repository.favorite_movies()


class WatchedViewModel(MovieListViewModel):
    label = "watched movies"

    def live_query(self) -> LiveQuery:
        return self.repository.watched_movies()


# ============== Detail ==============


@dataclass(frozen=True)
class DetailState:
    movie: UiState = IDLE


class DetailViewModel(BaseViewModel):
    """Follows a single movie; toggles invert whatever is currently shown."""

    def __init__(self, repository: MovieRepository, movie_id: int):
        self.movie_id = movie_id
        super().__init__(repository)
        self._load_job: Optional[asyncio.Task] = None

    def initial_state(self) -> DetailState:
        return DetailState()

    def load_movie_details(self) -> asyncio.Task:
        if self._load_job is not None:
            self._load_job.cancel()
        self._load_job = self.launch(self._collect())
        return self._load_job

    async def _collect(self) -> None:
        self.set_state(movie=LOADING)
        try:
            async for movie in self.repository.movie_by_id(self.movie_id).stream():
                self.set_state(movie=Success(movie))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Failed to load movie {self.movie_id}: {e}")
            self.set_state(movie=Error(str(e) or "Unknown error"))
            self.emit_event(ShowError("Failed to load movie details"))

    def _current_movie(self) -> Optional[Movie]:
        if isinstance(self.state.movie, Success):
            return self.state.movie.data
        return None

    def toggle_favorite(self, movie: Optional[Movie] = None) -> Optional[asyncio.Task]:
        movie = movie or self._current_movie()
        if movie is None:
            return None
        return super().toggle_favorite(movie)

    def toggle_watched(self, movie: Optional[Movie] = None) -> Optional[asyncio.Task]:
        movie = movie or self._current_movie()
        if movie is None:
            return None
        return super().toggle_watched(movie)


# ============== Search ==============


@dataclass(frozen=True)
class SearchState:
    search_query: str = ""
    search_results: UiState = IDLE


class SearchViewModel(BaseViewModel):
    """Debounced search.

    Every query change cancels the pending delay and any search in flight,
    then waits `debounce_ms` before searching. A cancelled search never
    touches the state.
    """

    def __init__(
        self,
        repository: MovieRepository,
        debounce_ms: int = Config.SEARCH_DEBOUNCE_MS,
        min_length: int = Config.SEARCH_MIN_LENGTH,
    ):
        super().__init__(repository)
        self.debounce = debounce_ms / 1000
        self.min_length = min_length
        self.search_job: Optional[asyncio.Task] = None

    def initial_state(self) -> SearchState:
        return SearchState()

    def _cancel_search(self) -> None:
        if self.search_job is not None:
            self.search_job.cancel()
            self.search_job = None

    def update_search_query(self, query: str) -> None:
        self.set_state(search_query=query)
        self._cancel_search()

        if len(query) >= self.min_length:
            self.search_job = self.launch(self._debounced_search(query))
        elif not query:
            self.set_state(search_results=IDLE)

    def perform_search(self) -> None:
        """Search right away for the current query, skipping the delay."""
        query = self.state.search_query
        if len(query) >= self.min_length:
            self._cancel_search()
            self.search_job = self.launch(self._search(query))

    def clear_search(self) -> None:
        self._cancel_search()
        self.state = SearchState()

    async def _debounced_search(self, query: str) -> None:
        await asyncio.sleep(self.debounce)
        await self._search(query)

    async def _search(self, query: str) -> None:
        self.set_state(search_results=LOADING)
        try:
            results = await asyncio.to_thread(self.repository.search, query)
        except asyncio.CancelledError:
            # A superseding query may not start a search of its own
            if self.state.search_results == LOADING:
                self.set_state(search_results=IDLE)
            raise
        except Exception as e:
            logger.error(f"Search for '{query}' failed: {e}")
            self.set_state(search_results=Error(str(e) or "Unknown error"))
            self.emit_event(ShowError(str(e) or "Search failed"))
            return

        self.set_state(search_results=Success(results))
