"""Command line entry point for the Movie Tracker."""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from movietracker.config import Config
from movietracker.models import Movie
from movietracker.web.repository import MovieRepository, build_repository


def setup_logging(level: str) -> None:
    """Configure logging."""
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    log_file = log_dir / f"movietracker_{datetime.now().strftime('%Y-%m-%d')}.log"

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )


def format_movie(movie: Movie) -> str:
    marks = ("*" if movie.is_favorite else " ") + ("w" if movie.is_watched else " ")
    return f"[{marks}] {movie.id:>5}  {movie.title} ({movie.year})"


def print_movies(movies: List[Movie]) -> None:
    if not movies:
        print("No movies found")
        return
    for movie in movies:
        print(format_movie(movie))


def parse_switch(value: str) -> bool:
    if value in ("on", "true", "yes", "1"):
        return True
    if value in ("off", "false", "no", "0"):
        return False
    raise argparse.ArgumentTypeError(f"expected on/off, got '{value}'")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Track favorite and watched movies")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("refresh", help="Fetch all movies from the movie service")

    list_parser = commands.add_parser("list", help="List stored movies")
    which = list_parser.add_mutually_exclusive_group()
    which.add_argument("--favorites", action="store_true", help="Only favorites")
    which.add_argument("--watched", action="store_true", help="Only watched movies")

    show_parser = commands.add_parser("show", help="Show one stored movie")
    show_parser.add_argument("movie_id", type=int)
    show_parser.add_argument(
        "--remote", action="store_true", help="Re-fetch it from the movie service first"
    )

    search_parser = commands.add_parser("search", help="Search the movie service")
    search_parser.add_argument("query")

    add_parser = commands.add_parser("add", help="Add a movie to the movie service")
    add_parser.add_argument("title")
    add_parser.add_argument("year", type=int)

    for name in ("favorite", "watched"):
        flag_parser = commands.add_parser(name, help=f"Set or clear the {name} flag")
        flag_parser.add_argument("movie_id", type=int)
        flag_parser.add_argument("value", type=parse_switch, help="on or off")

    commands.add_parser("reset", help="Delete every stored movie")
    commands.add_parser("check", help="Test the connection to the movie service")

    return parser


def run(args: argparse.Namespace, repo: MovieRepository) -> int:
    """Execute a parsed command against the repository."""
    logger = logging.getLogger(__name__)

    if args.command == "refresh":
        if not repo.refresh():
            logger.error("Refresh failed, local movies left unchanged")
            return 1
        print(f"{repo.db.count_movies()} movies stored")

    elif args.command == "list":
        if args.favorites:
            print_movies(repo.favorite_movies().get())
        elif args.watched:
            print_movies(repo.watched_movies().get())
        else:
            print_movies(repo.all_movies().get())

    elif args.command == "show":
        movie: Optional[Movie]
        if args.remote:
            movie = repo.refresh_movie(args.movie_id)
        else:
            movie = repo.get_movie(args.movie_id)
        if movie is None:
            logger.error(f"Movie {args.movie_id} not found")
            return 1
        print(format_movie(movie))
        print(f"        {movie.image_url}")

    elif args.command == "search":
        print_movies(repo.search(args.query))

    elif args.command == "add":
        movie = repo.add(args.title, args.year)
        if movie is None:
            logger.error(f"Could not add '{args.title}'")
            return 1
        print(format_movie(movie))

    elif args.command == "favorite":
        if not repo.toggle_favorite(args.movie_id, args.value):
            return 1

    elif args.command == "watched":
        if not repo.toggle_watched(args.movie_id, args.value):
            return 1

    elif args.command == "reset":
        repo.db.clear()
        print("All stored movies deleted")

    elif args.command == "check":
        source = repo.synchronizer.source
        if not source.test_connection():
            logger.error(f"Failed to connect to {source.name}")
            return 1
        print(f"Connected to {source.name}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Validate configuration
    errors = Config.validate()
    if errors:
        print("Configuration errors:")
        for error in errors:
            print(f"  - {error}")
        print("\nPlease check your .env file")
        return 1

    # Setup
    Config.ensure_directories()
    setup_logging(Config.LOG_LEVEL)
    logger = logging.getLogger(__name__)

    repo = build_repository()
    try:
        return run(args, repo)
    except Exception as e:
        # Search and single-movie refresh propagate remote errors
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
