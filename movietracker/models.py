"""Data models for the Movie Tracker."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RemoteMovie:
    """A movie as the remote service sends it. Carries no user flags."""

    id: int
    title: str
    year: int
    image_url: str

    @classmethod
    def from_json(cls, data: dict) -> "RemoteMovie":
        """Build from an API payload (`id`, `title`, `year`, `imageUrl`)."""
        return cls(
            id=int(data["id"]),
            title=data["title"],
            year=int(data["year"]),
            image_url=data.get("imageUrl", ""),
        )

    def to_movie(self, is_favorite: bool = False, is_watched: bool = False) -> "Movie":
        """Materialize a local movie, flags default to False."""
        return Movie(
            id=self.id,
            title=self.title,
            year=self.year,
            image_url=self.image_url,
            is_favorite=is_favorite,
            is_watched=is_watched,
        )


@dataclass(frozen=True)
class Movie:
    """Represents a tracked movie with its local flags."""

    id: int
    title: str
    year: int
    image_url: str
    is_favorite: bool = False
    is_watched: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "year": self.year,
            "image_url": self.image_url,
            "is_favorite": self.is_favorite,
            "is_watched": self.is_watched,
        }
