"""FetchController: one observable, cancellable retrieval.

The controller adopts a target, immediately moves to ``loading`` and runs the
retrieval as a single asyncio task that suspends at the transport call. When
the task resumes it applies ``fetched`` or ``failed`` through the reducer,
unless one of two guards says the result is no longer wanted:

- the CancellationToken was armed by ``teardown()`` (owning scope ended);
- a newer attempt was started since (generation counter).

Failures never escape the controller. They are normalised into ErrorInfo and
surfaced on the state. Transport calls are never aborted; their results are
simply discarded.
"""

from __future__ import annotations

import asyncio
import weakref
from collections import deque
from contextlib import suppress
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import structlog

from fetchstate.cache import ResponseCache
from fetchstate.errors import ErrorCode, ErrorInfo, FetchError
from fetchstate.lifecycle import CancellationToken
from fetchstate.models.request import RequestDescriptor
from fetchstate.models.state import Phase, RetrievalState
from fetchstate.reducer import Failure, Request, Reset, Success, reduce

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from types import TracebackType

    from fetchstate.models.request import RequestOptions
    from fetchstate.protocols import ResponseProtocol, StateObserver, TransportProtocol
    from fetchstate.reducer import Action

log = structlog.get_logger()

T = TypeVar("T")


def application_error(response: ResponseProtocol) -> FetchError:
    """Build the error for a response that completed without success.

    The body's ``message`` field is used when the body decodes to an object
    carrying a non-empty one; otherwise the status line is used.
    """
    message = ""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        candidate = body.get("message")
        if isinstance(candidate, str):
            message = candidate.strip()
    if not message:
        message = f"HTTP {response.status_code} {response.reason}".rstrip()
    return FetchError(
        code=ErrorCode.APPLICATION_ERROR,
        message=message,
        status_code=response.status_code,
        recoverable=response.status_code >= 500,
    )


class FetchController(Generic[T]):
    """Runs retrievals for a changing target and exposes their state.

    Must be constructed inside a running event loop when a target is given,
    since activation starts the attempt task right away.
    """

    def __init__(
        self,
        transport: TransportProtocol,
        target: str | None = None,
        options: RequestOptions | None = None,
        *,
        use_cache: bool = True,
    ) -> None:
        self._transport = transport
        self._cache: ResponseCache[T] | None = ResponseCache() if use_cache else None
        self._token = CancellationToken()
        self._state: RetrievalState[T] = RetrievalState()
        self._descriptor: RequestDescriptor | None = None
        self._generation = 0
        # Strong references so in-flight attempts are not garbage collected
        self._tasks: set[asyncio.Task[None]] = set()
        self._observers: list[StateObserver] = []
        # Weak so an abandoned watch() generator does not keep receiving states
        self._watchers: weakref.WeakSet[asyncio.Queue[RetrievalState[T] | None]] = (
            weakref.WeakSet()
        )
        # Emissions made while observers are being notified wait their turn here
        self._outbox: deque[RetrievalState[T]] = deque()
        self._notifying = False

        if target:
            self.set_target(target, options)

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def state(self) -> RetrievalState[T]:
        return self._state

    @property
    def target(self) -> str | None:
        return self._descriptor.target if self._descriptor is not None else None

    @property
    def options(self) -> RequestOptions | None:
        return self._descriptor.options if self._descriptor is not None else None

    @property
    def cache(self) -> ResponseCache[T] | None:
        return self._cache

    @property
    def torn_down(self) -> bool:
        return self._token.cancelled

    @property
    def generation(self) -> int:
        return self._generation

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    def set_target(self, target: str | None, options: RequestOptions | None = None) -> None:
        """Adopt a new target.

        The same target as the current one is a no-op. A falsy target clears
        the controller back to ``idle`` and orphans any in-flight attempt.
        """
        if self._token.cancelled:
            log.debug("fetch_ignored", target=target, reason="torn_down")
            return

        if (target or None) == self.target:
            return

        if not target:
            self._generation += 1
            self._descriptor = None
            if self._state.phase != Phase.IDLE:
                self._dispatch(Reset())
            return

        self._start(RequestDescriptor(target=target, options=options))

    def reload(self) -> None:
        """Re-run the retrieval for the current target."""
        if self._token.cancelled or self._descriptor is None:
            return
        self._start(self._descriptor)

    def _start(self, descriptor: RequestDescriptor) -> None:
        loop = asyncio.get_running_loop()

        self._descriptor = descriptor
        self._generation += 1
        generation = self._generation

        # loading is applied before any suspension point
        self._dispatch(Request())
        log.debug("fetch_started", target=descriptor.target, generation=generation)

        if self._cache is not None and descriptor.cache_key in self._cache:
            log.debug("fetch_cache_hit", target=descriptor.target)
            self._commit(generation, Success(self._cache.get(descriptor.cache_key)))
            return

        task = loop.create_task(self._attempt(descriptor, generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _attempt(self, descriptor: RequestDescriptor, generation: int) -> None:
        try:
            response = await self._transport.perform(descriptor.target, descriptor.options)
            if not response.ok:
                raise application_error(response)
            try:
                payload = response.json()
            except ValueError as exc:
                raise FetchError(
                    code=ErrorCode.TRANSPORT_ERROR,
                    message=f"Malformed response body from {descriptor.target}: {exc}",
                    status_code=response.status_code,
                ) from exc
        except FetchError as exc:
            error = exc.to_error_info()
        except Exception as exc:
            log.warning("fetch_unexpected_error", target=descriptor.target, exc_info=True)
            error = ErrorInfo.from_exception(exc)
        else:
            if self._cache is not None:
                self._cache.set(descriptor.cache_key, payload)
            self._commit(generation, Success(payload))
            return

        self._commit(generation, Failure(error))

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _commit(self, generation: int, action: Action) -> bool:
        """Apply a resolution unless the controller no longer wants it."""
        if self._token.cancelled:
            log.debug("fetch_result_discarded", reason="torn_down", generation=generation)
            return False
        if generation != self._generation:
            log.debug(
                "fetch_result_discarded",
                reason="superseded",
                generation=generation,
                latest=self._generation,
            )
            return False
        self._dispatch(action)
        return True

    def _dispatch(self, action: Action) -> None:
        state = reduce(self._state, action)
        self._state = state

        if state.phase == Phase.FETCHED:
            log.info("fetch_complete", target=self.target)
        elif state.phase == Phase.FAILED and state.error is not None:
            log.info(
                "fetch_failed",
                target=self.target,
                code=state.error.code,
                message=state.error.message,
            )

        self._outbox.append(state)
        if self._notifying:
            # An observer re-entered the controller; the outer loop delivers this
            return
        self._notifying = True
        try:
            while self._outbox:
                self._notify(self._outbox.popleft())
        finally:
            self._notifying = False

    def _notify(self, state: RetrievalState[T]) -> None:
        for observer in list(self._observers):
            try:
                observer(state)
            except Exception:
                log.error("state_observer_error", phase=state.phase, exc_info=True)
        for queue in list(self._watchers):
            queue.put_nowait(state)

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        """Call ``observer`` with every emitted state. Returns an unsubscriber."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            with suppress(ValueError):
                self._observers.remove(observer)

        return unsubscribe

    async def watch(self) -> AsyncIterator[RetrievalState[T]]:
        """Yield the current state, then every emitted state until teardown.

        A consumer that stops iterating early should close the generator
        (``aclose()``, or leave the ``async for`` normally); an abandoned one
        stops receiving states once it is garbage collected.
        """
        if self._token.cancelled:
            yield self._state
            return

        queue: asyncio.Queue[RetrievalState[T] | None] = asyncio.Queue()
        self._watchers.add(queue)
        try:
            yield self._state
            while True:
                state = await queue.get()
                if state is None:
                    return
                yield state
        finally:
            self._watchers.discard(queue)

    async def wait(self) -> RetrievalState[T]:
        """Wait for every in-flight attempt to resolve and return the state.

        Hangs for as long as the transport does; the core imposes no timeout.
        """
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return self._state
            await asyncio.gather(*pending)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def teardown(self) -> None:
        """Signal that the owning scope has ended. Idempotent."""
        if not self._token.cancel():
            return
        log.debug(
            "fetch_controller_torn_down",
            target=self.target,
            phase=self._state.phase,
            pending=sum(1 for task in self._tasks if not task.done()),
        )
        for queue in list(self._watchers):
            queue.put_nowait(None)

    async def __aenter__(self) -> FetchController[T]:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.teardown()


async def retrieve(
    transport: TransportProtocol,
    target: str,
    options: RequestOptions | None = None,
) -> RetrievalState[Any]:
    """Run a single retrieval to completion and return its settled state."""
    async with FetchController[Any](transport, target, options, use_cache=False) as controller:
        return await controller.wait()
