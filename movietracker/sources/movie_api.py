"""HTTP client for the remote movie service."""

import logging
from typing import List, Optional

import requests

from movietracker.models import RemoteMovie
from movietracker.sources.base import BaseSource

logger = logging.getLogger(__name__)


class MovieApiError(Exception):
    """Raised when the movie service is unreachable or answers with an error."""


class MovieApiSource(BaseSource):
    """Movie service client."""

    def __init__(self, base_url: str, timeout: int = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    @property
    def name(self) -> str:
        return "Movie API"

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> dict | list:
        """Make a request to the movie service and decode the JSON body."""
        url = f"{self.base_url}/{endpoint}"

        try:
            response = self.session.request(
                method, url, params=params, json=json, timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            # JSON decode errors are RequestException subclasses in requests>=2.27
            raise MovieApiError(f"{method} {endpoint} failed: {e}") from e

    def _parse_list(self, data: dict | list) -> List[RemoteMovie]:
        if not isinstance(data, list):
            raise MovieApiError(f"Expected a list of movies, got {type(data).__name__}")
        try:
            return [RemoteMovie.from_json(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise MovieApiError(f"Malformed movie record: {e}") from e

    def _parse_one(self, data: dict | list) -> RemoteMovie:
        try:
            return RemoteMovie.from_json(data)
        except (KeyError, TypeError, ValueError) as e:
            raise MovieApiError(f"Malformed movie record: {e}") from e

    def test_connection(self) -> bool:
        """Test movie service connection."""
        try:
            self._request("GET", "movies")
            return True
        except MovieApiError as e:
            logger.error(f"Movie API connection failed: {e}")
            return False

    def get_all_movies(self) -> List[RemoteMovie]:
        """Get all movies from the service."""
        logger.debug("Fetching all movies...")
        movies = self._parse_list(self._request("GET", "movies"))
        logger.info(f"Fetched {len(movies)} movies from {self.name}")
        return movies

    def search_movies(self, query: str) -> List[RemoteMovie]:
        """Search the service for movies matching the query."""
        logger.debug(f"Searching movies for '{query}'...")
        movies = self._parse_list(self._request("GET", "movies", params={"search": query}))
        logger.info(f"Found {len(movies)} movies matching '{query}'")
        return movies

    def get_movie(self, movie_id: int) -> RemoteMovie:
        """Get a single movie by ID."""
        return self._parse_one(self._request("GET", f"movies/{movie_id}"))

    def add_movie(self, title: str, year: int) -> RemoteMovie:
        """Create a movie and return the record the service assigned."""
        movie = self._parse_one(
            self._request("POST", "movies", json={"title": title, "year": year})
        )
        logger.info(f"Created '{movie.title}' ({movie.year}) with id {movie.id}")
        return movie
