from __future__ import annotations

from movietracker.models import Movie


def test_upsert_replaces_by_id_and_reads_in_store_order(database) -> None:
    database.upsert_movies([Movie(3, "C", 2003, "c"), Movie(1, "A", 2001, "a")])
    database.upsert_movie(Movie(1, "A2", 2011, "a2", is_favorite=True))

    assert database.get_all_movies() == [
        Movie(1, "A2", 2011, "a2", is_favorite=True),
        Movie(3, "C", 2003, "c"),
    ]


def test_status_updates_drive_filtered_reads(database) -> None:
    database.upsert_movies([Movie(1, "A", 2001, ""), Movie(2, "B", 2002, "")])

    assert database.update_favorite_status(1, True) is True
    assert database.update_watched_status(2, True) is True

    assert [m.id for m in database.get_favorite_movies()] == [1]
    assert [m.id for m in database.get_watched_movies()] == [2]

    database.update_favorite_status(1, False)
    assert database.get_favorite_movies() == []


def test_status_update_on_unknown_movie_returns_false(database) -> None:
    assert database.update_favorite_status(99, True) is False
    assert database.update_watched_status(99, True) is False
    assert database.get_all_movies() == []


def test_get_movies_by_ids_ignores_unknown(database) -> None:
    database.upsert_movies([Movie(1, "A", 2001, ""), Movie(2, "B", 2002, "")])

    assert [m.id for m in database.get_movies_by_ids([2, 7, 1])] == [1, 2]
    assert database.get_movies_by_ids([]) == []


def test_clear_deletes_everything(database) -> None:
    database.upsert_movies([Movie(1, "A", 2001, ""), Movie(2, "B", 2002, "")])

    database.clear()

    assert database.count_movies() == 0
    assert database.get_movie(1) is None


def test_listeners_fire_on_movie_writes_only(database) -> None:
    calls = []
    listener = lambda: calls.append("changed")  # noqa: E731
    database.add_listener(listener)

    database.upsert_movie(Movie(1, "A", 2001, ""))
    database.update_favorite_status(1, True)
    database.update_favorite_status(42, True)  # no such row
    database.update_sync_status(status="syncing")
    assert calls == ["changed", "changed"]

    database.remove_listener(listener)
    database.clear()
    assert calls == ["changed", "changed"]


def test_failing_listener_does_not_break_writes(database) -> None:
    def broken() -> None:
        raise RuntimeError("boom")

    database.add_listener(broken)
    database.upsert_movie(Movie(1, "A", 2001, ""))

    assert database.get_movie(1) == Movie(1, "A", 2001, "")


def test_sync_status_defaults_to_idle(database) -> None:
    status = database.get_sync_status()

    assert status.status == "idle"
    assert status.last_sync is None

    database.mark_synced(5)
    status = database.get_sync_status()
    assert status.movies_count == 5
    assert status.last_sync is not None
