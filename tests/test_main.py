from __future__ import annotations

import argparse

import pytest

from movietracker.main import build_parser, parse_switch, run


def run_command(repository, *argv: str) -> int:
    return run(build_parser().parse_args(list(argv)), repository)


def test_refresh_then_list(repository, capsys) -> None:
    assert run_command(repository, "refresh") == 0
    assert "3 movies stored" in capsys.readouterr().out

    assert run_command(repository, "list") == 0
    out = capsys.readouterr().out
    assert "Catch Me If You Can (2002)" in out
    assert "Heat (1995)" in out


def test_flag_commands_and_filtered_list(repository, capsys) -> None:
    run_command(repository, "refresh")

    assert run_command(repository, "favorite", "1", "on") == 0
    assert run_command(repository, "watched", "3", "on") == 0
    capsys.readouterr()

    run_command(repository, "list", "--favorites")
    out = capsys.readouterr().out
    assert "Cats" in out
    assert "Heat" not in out

    run_command(repository, "list", "--watched")
    assert "[ w]     3  Heat (1995)" in capsys.readouterr().out


def test_flag_on_unknown_movie_fails(repository) -> None:
    assert run_command(repository, "favorite", "9", "on") == 1


def test_add_and_show(repository, source, capsys) -> None:
    assert run_command(repository, "add", "New Movie", "2024") == 0
    assert "New Movie (2024)" in capsys.readouterr().out

    assert run_command(repository, "show", "100") == 0
    assert "https://img.example/100.jpg" in capsys.readouterr().out

    source.fail = True
    assert run_command(repository, "add", "Another", "2025") == 1


def test_refresh_failure_exit_code(repository, source) -> None:
    source.fail = True

    assert run_command(repository, "refresh") == 1


def test_show_remote_and_search(repository, capsys) -> None:
    assert run_command(repository, "show", "2", "--remote") == 0
    assert "Catch Me If You Can" in capsys.readouterr().out

    assert run_command(repository, "search", "zzz") == 0
    assert "No movies found" in capsys.readouterr().out


def test_reset_clears_store(repository) -> None:
    run_command(repository, "refresh")

    assert run_command(repository, "reset") == 0
    assert repository.all_movies().get() == []


def test_check_reports_the_connection(repository, source, capsys) -> None:
    assert run_command(repository, "check") == 0
    assert "Connected to Fake" in capsys.readouterr().out

    source.fail = True
    assert run_command(repository, "check") == 1


def test_parse_switch() -> None:
    assert parse_switch("on") is True
    assert parse_switch("off") is False
    with pytest.raises(argparse.ArgumentTypeError):
        parse_switch("maybe")
