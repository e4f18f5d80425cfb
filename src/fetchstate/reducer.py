"""Pure transition function for RetrievalState.

Every state change a FetchController makes goes through ``reduce``:

  Request        any phase        → loading   (data and error cleared)
  Success(p)     loading          → fetched   (data = p)
  Failure(e)     loading          → failed    (error = e)
  Reset          any phase        → idle

``fetched`` and ``failed`` are only reachable from ``loading``; leaving them
requires a new Request (or a Reset when the target is cleared).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from fetchstate.models.state import Phase, RetrievalState

if TYPE_CHECKING:
    from fetchstate.errors import ErrorInfo

T = TypeVar("T")


@dataclass(frozen=True)
class Request:
    pass


@dataclass(frozen=True)
class Success(Generic[T]):
    payload: T


@dataclass(frozen=True)
class Failure:
    error: ErrorInfo


@dataclass(frozen=True)
class Reset:
    pass


Action = Request | Success[Any] | Failure | Reset


def reduce(state: RetrievalState[T], action: Action) -> RetrievalState[T]:
    if isinstance(action, Request):
        return RetrievalState(phase=Phase.LOADING)

    if isinstance(action, Reset):
        return RetrievalState(phase=Phase.IDLE)

    if isinstance(action, Success | Failure):
        if state.phase != Phase.LOADING:
            raise ValueError(
                f"Cannot apply {type(action).__name__} in phase {state.phase.value!r}"
            )
        if isinstance(action, Success):
            return RetrievalState(phase=Phase.FETCHED, data=action.payload)
        return RetrievalState(phase=Phase.FAILED, error=action.error)

    raise TypeError(f"Unknown action: {action!r}")
