"""Abstract base class for remote movie sources."""

from abc import ABC, abstractmethod
from typing import List

from movietracker.models import RemoteMovie


class BaseSource(ABC):
    """Abstract base class for remote movie sources.

    Implementations raise on any failure; callers decide whether to swallow.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the source name."""
        pass

    @abstractmethod
    def get_all_movies(self) -> List[RemoteMovie]:
        """
        Get every movie the service knows about.

        Returns:
            List of RemoteMovie objects.
        """
        pass

    @abstractmethod
    def search_movies(self, query: str) -> List[RemoteMovie]:
        """
        Search movies by title.

        Returns:
            List of matching RemoteMovie objects.
        """
        pass

    @abstractmethod
    def get_movie(self, movie_id: int) -> RemoteMovie:
        """Get a single movie by its identifier."""
        pass

    @abstractmethod
    def add_movie(self, title: str, year: int) -> RemoteMovie:
        """
        Create a movie on the service.

        Returns:
            The canonical record, with its server-assigned identifier.
        """
        pass

    def test_connection(self) -> bool:
        """
        Test if the source is accessible.

        Returns:
            True if connection is successful, False otherwise.
        """
        return True
