"""Unit tests for fetchstate.reducer."""

from __future__ import annotations

import pytest

from fetchstate.errors import ErrorCode, ErrorInfo
from fetchstate.models import Phase, RetrievalState
from fetchstate.reducer import Failure, Request, Reset, Success, reduce

ERROR = ErrorInfo(code=ErrorCode.APPLICATION_ERROR, message="not found", status_code=404)


class TestRequest:
    def test_idle_to_loading(self) -> None:
        state = reduce(RetrievalState(), Request())
        assert state == RetrievalState(phase=Phase.LOADING)

    def test_clears_previous_data(self) -> None:
        fetched = RetrievalState(phase=Phase.FETCHED, data=[1, 2, 3])
        state = reduce(fetched, Request())
        assert state.phase == Phase.LOADING
        assert state.data is None

    def test_clears_previous_error(self) -> None:
        failed = RetrievalState(phase=Phase.FAILED, error=ERROR)
        state = reduce(failed, Request())
        assert state.phase == Phase.LOADING
        assert state.error is None


class TestSettle:
    def test_success_from_loading(self) -> None:
        state = reduce(RetrievalState(phase=Phase.LOADING), Success([1, 2, 3]))
        assert state == RetrievalState(phase=Phase.FETCHED, data=[1, 2, 3])

    def test_failure_from_loading(self) -> None:
        state = reduce(RetrievalState(phase=Phase.LOADING), Failure(ERROR))
        assert state.phase == Phase.FAILED
        assert state.error == ERROR
        assert state.data is None

    @pytest.mark.parametrize("phase", [Phase.IDLE, Phase.FETCHED, Phase.FAILED])
    def test_success_outside_loading_rejected(self, phase: Phase) -> None:
        with pytest.raises(ValueError, match="Cannot apply Success"):
            reduce(RetrievalState(phase=phase), Success("late"))

    def test_failure_outside_loading_rejected(self) -> None:
        with pytest.raises(ValueError, match="Cannot apply Failure in phase 'fetched'"):
            reduce(RetrievalState(phase=Phase.FETCHED, data=1), Failure(ERROR))


class TestReset:
    @pytest.mark.parametrize("phase", list(Phase))
    def test_any_phase_to_idle(self, phase: Phase) -> None:
        assert reduce(RetrievalState(phase=phase), Reset()) == RetrievalState()


def test_unknown_action_rejected() -> None:
    with pytest.raises(TypeError):
        reduce(RetrievalState(), "request")  # type: ignore[arg-type]
