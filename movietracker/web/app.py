"""FastAPI web application."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Literal, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, Field

from movietracker.config import Config
from movietracker.web.repository import MovieRepository, build_repository
from movietracker.web.state import state_to_dict
from movietracker.web.viewmodels import SearchViewModel

logger = logging.getLogger(__name__)

# Templates
templates_path = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(templates_path))


# Pydantic models for API
class MovieCreate(BaseModel):
    title: str = Field(min_length=1)
    year: int


class FlagUpdate(BaseModel):
    value: bool


class SearchQuery(BaseModel):
    query: str


def create_app(
    repository: Optional[MovieRepository] = None,
    sync_interval: int = Config.SYNC_INTERVAL,
) -> FastAPI:
    """Build the web application around a repository (built from Config if omitted)."""
    repo = repository or build_repository()
    synchronizer = repo.synchronizer

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifecycle."""
        logger.info("Starting web application...")
        app.state.search = SearchViewModel(repo)

        if sync_interval > 0:
            synchronizer.start(interval_minutes=sync_interval)

        yield

        await app.state.search.close()
        synchronizer.stop()

    app = FastAPI(
        title="Movie Tracker",
        description="Track your favorite and watched movies",
        lifespan=lifespan,
    )
    app.state.repository = repo

    # ============== HTML Pages ==============

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request):
        """Main dashboard page."""
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "movies": repo.all_movies().get(),
                "sync_status": repo.db.get_sync_status(),
            },
        )

    # ============== API Endpoints ==============

    @app.get("/api/movies")
    async def get_movies(
        filter: Literal["all", "favorites", "watched"] = Query("all"),
    ):
        """Get stored movies, optionally only favorites or watched."""
        if filter == "favorites":
            live = repo.favorite_movies()
        elif filter == "watched":
            live = repo.watched_movies()
        else:
            live = repo.all_movies()

        movies = live.get()
        return {"movies": [m.to_dict() for m in movies], "total": len(movies)}

    @app.get("/api/movies/{movie_id}")
    async def get_movie(movie_id: int):
        """Get a single movie."""
        movie = repo.get_movie(movie_id)
        if not movie:
            raise HTTPException(status_code=404, detail="Movie not found")
        return movie.to_dict()

    @app.post("/api/movies", status_code=201)
    def add_movie(body: MovieCreate):
        """Create a movie on the remote service and store it."""
        movie = repo.add(body.title, body.year)
        if movie is None:
            raise HTTPException(status_code=502, detail="Could not add movie")
        return movie.to_dict()

    @app.patch("/api/movies/{movie_id}/favorite")
    def set_favorite(movie_id: int, body: FlagUpdate):
        """Set or clear the favorite flag."""
        if not repo.toggle_favorite(movie_id, body.value):
            raise HTTPException(status_code=404, detail="Movie not found")
        return repo.get_movie(movie_id).to_dict()

    @app.patch("/api/movies/{movie_id}/watched")
    def set_watched(movie_id: int, body: FlagUpdate):
        """Set or clear the watched flag."""
        if not repo.toggle_watched(movie_id, body.value):
            raise HTTPException(status_code=404, detail="Movie not found")
        return repo.get_movie(movie_id).to_dict()

    @app.post("/api/movies/{movie_id}/refresh")
    def refresh_movie(movie_id: int):
        """Re-fetch one movie from the remote service."""
        try:
            movie = repo.refresh_movie(movie_id)
        except Exception as e:
            logger.error(f"Refreshing movie {movie_id} failed: {e}")
            raise HTTPException(status_code=502, detail=str(e))
        if movie is None:
            raise HTTPException(status_code=404, detail="Movie not found")
        return movie.to_dict()

    # ============== Search ==============

    @app.get("/api/search")
    def search(q: str = Query(..., min_length=1)):
        """Search the remote service and merge the results."""
        try:
            movies = repo.search(q)
        except Exception as e:
            logger.error(f"Search for '{q}' failed: {e}")
            raise HTTPException(status_code=502, detail=str(e))
        return {"query": q, "movies": [m.to_dict() for m in movies]}

    @app.post("/api/search/query")
    async def update_search_query(body: SearchQuery, request: Request):
        """Update the live search query; the search runs after the debounce delay."""
        search_vm: SearchViewModel = request.app.state.search
        search_vm.update_search_query(body.query)
        return _search_state(search_vm)

    @app.get("/api/search/state")
    async def get_search_state(request: Request):
        """Current live search state."""
        return _search_state(request.app.state.search)

    # ============== Sync ==============

    @app.get("/api/sync/status")
    async def get_sync_status():
        """Get sync status."""
        status = repo.db.get_sync_status()
        return {
            "last_sync": status.last_sync.isoformat() if status.last_sync else None,
            "movies_count": status.movies_count,
            "status": status.status,
            "error_message": status.error_message,
            "is_syncing": synchronizer.is_syncing,
        }

    @app.post("/api/sync/trigger")
    def trigger_sync(wait: bool = Query(False)):
        """Manually trigger a refresh, in the background unless `wait` is set."""
        if wait:
            if repo.refresh():
                return {"status": "success", "message": "Movies refreshed"}
            return {"status": "error", "message": "Refresh failed"}

        if not synchronizer.refresh_in_background():
            return {"status": "already_syncing", "message": "Sync already in progress"}

        return {"status": "started", "message": "Sync started"}

    return app


def _search_state(search_vm: SearchViewModel) -> dict:
    return {
        "query": search_vm.state.search_query,
        "results": state_to_dict(search_vm.state.search_results),
    }
