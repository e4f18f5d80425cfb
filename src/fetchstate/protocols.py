"""Protocol interfaces for the capabilities a FetchController consumes.

The controller references these protocols, not the concrete httpx-backed
implementation. Tests drive it with lightweight in-memory transports.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from fetchstate.models.request import RequestOptions
    from fetchstate.models.state import RetrievalState


class ResponseProtocol(Protocol):
    """A completed transport exchange, successful or not."""

    @property
    def ok(self) -> bool: ...

    @property
    def status_code(self) -> int: ...

    @property
    def reason(self) -> str: ...

    def json(self) -> Any: ...


class TransportProtocol(Protocol):
    """Performs one network retrieval for a target."""

    async def perform(
        self, target: str, options: RequestOptions | None = None
    ) -> ResponseProtocol: ...


StateObserver = Callable[["RetrievalState[Any]"], None]
