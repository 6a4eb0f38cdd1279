from __future__ import annotations

import asyncio

import pytest

from movietracker.models import Movie
from movietracker.web.live import LiveQuery


def test_subscribe_emits_current_snapshot_then_changes(database) -> None:
    database.upsert_movie(Movie(1, "A", 2001, ""))
    live = LiveQuery(database, database.get_favorite_movies)
    seen = []

    with live.subscribe(seen.append):
        database.update_favorite_status(1, True)
        database.update_favorite_status(1, False)

    assert seen == [[], [Movie(1, "A", 2001, "", is_favorite=True)], []]


def test_unchanged_snapshot_is_not_re_emitted(database) -> None:
    database.upsert_movies([Movie(1, "A", 2001, ""), Movie(2, "B", 2002, "")])
    live = LiveQuery(database, lambda: database.get_movie(1))
    seen = []

    subscription = live.subscribe(seen.append)
    database.update_watched_status(2, True)
    database.update_watched_status(1, True)
    subscription.close()

    assert seen == [Movie(1, "A", 2001, ""), Movie(1, "A", 2001, "", is_watched=True)]


def test_closed_subscription_gets_nothing(database) -> None:
    live = LiveQuery(database, database.get_all_movies)
    seen = []

    subscription = live.subscribe(seen.append)
    subscription.close()
    database.upsert_movie(Movie(1, "A", 2001, ""))

    assert seen == [[]]
    assert subscription.closed is True


def test_query_errors_go_to_on_error(database) -> None:
    def broken():
        raise RuntimeError("disk I/O error")

    errors = []
    live = LiveQuery(database, broken)

    with live.subscribe(lambda snapshot: None, on_error=errors.append):
        database.upsert_movie(Movie(1, "A", 2001, ""))

    assert [str(e) for e in errors] == ["disk I/O error", "disk I/O error"]


def test_subscribe_without_error_handler_raises(database) -> None:
    def broken():
        raise RuntimeError("disk I/O error")

    with pytest.raises(RuntimeError):
        LiveQuery(database, broken).subscribe(lambda snapshot: None)


def test_stream_yields_snapshots_from_writer_threads(database) -> None:
    live = LiveQuery(database, database.get_all_movies)

    async def scenario():
        stream = live.stream()
        first = await stream.__anext__()
        await asyncio.to_thread(database.upsert_movie, Movie(1, "A", 2001, ""))
        second = await asyncio.wait_for(stream.__anext__(), timeout=2)
        await stream.aclose()
        return first, second

    first, second = asyncio.run(scenario())

    assert first == []
    assert second == [Movie(1, "A", 2001, "")]
