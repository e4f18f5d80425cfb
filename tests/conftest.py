"""Shared test fixtures for the fetchstate test suite."""

from __future__ import annotations

import asyncio
import json
from collections import defaultdict
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

import pytest
import structlog

from fetchstate.transport import TransportResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from fetchstate.models.request import RequestOptions

Outcome = TransportResponse | BaseException


def json_response(status_code: int, body: Any = None) -> TransportResponse:
    """Build a TransportResponse carrying ``body`` as JSON (empty when None)."""
    content = b"" if body is None else json.dumps(body).encode("utf-8")
    return TransportResponse(
        status_code=status_code,
        reason=HTTPStatus(status_code).phrase,
        content=content,
    )


class FakeTransport:
    """In-memory transport whose calls stay pending until the test resolves them.

    Targets registered with ``script()`` resolve immediately instead.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, RequestOptions | None]] = []
        self._pending: dict[str, list[asyncio.Future[Outcome]]] = defaultdict(list)
        self._scripted: dict[str, Outcome] = {}

    def script(self, target: str, outcome: Outcome) -> None:
        self._scripted[target] = outcome

    def calls_for(self, target: str) -> int:
        return sum(1 for called, _ in self.calls if called == target)

    async def perform(
        self, target: str, options: RequestOptions | None = None
    ) -> TransportResponse:
        self.calls.append((target, options))
        if target in self._scripted:
            outcome = self._scripted[target]
        else:
            future: asyncio.Future[Outcome] = asyncio.get_running_loop().create_future()
            self._pending[target].append(future)
            outcome = await future
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def resolve(self, target: str, outcome: Outcome) -> None:
        """Resolve the oldest pending call for ``target``, waiting for it to start."""
        while not self._pending[target]:
            await asyncio.sleep(0)
        self._pending[target].pop(0).set_result(outcome)


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


@pytest.fixture()
def make_response() -> Callable[..., TransportResponse]:
    return json_response
