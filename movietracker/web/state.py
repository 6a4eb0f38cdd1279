"""UI state shared by the view-models: idle, loading, success or error."""

from dataclasses import dataclass
from typing import Any, Union

from movietracker.models import Movie


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Success:
    data: Any


@dataclass(frozen=True)
class Error:
    message: str


UiState = Union[Idle, Loading, Success, Error]

IDLE = Idle()
LOADING = Loading()


def _jsonable(data: Any) -> Any:
    if isinstance(data, Movie):
        return data.to_dict()
    if isinstance(data, (list, tuple)):
        return [_jsonable(item) for item in data]
    return data


def state_to_dict(state: UiState) -> dict:
    """Convert a UI state to a JSON-friendly dict."""
    match state:
        case Idle():
            return {"status": "idle"}
        case Loading():
            return {"status": "loading"}
        case Success(data=data):
            return {"status": "success", "data": _jsonable(data)}
        case Error(message=message):
            return {"status": "error", "message": message}
    raise TypeError(f"Not a UI state: {state!r}")
