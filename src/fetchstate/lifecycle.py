"""Cancellation token armed when a controller's owning scope ends."""

from __future__ import annotations


class CancellationToken:
    """One-way flag owned by a single FetchController.

    Only the teardown path arms it. In-flight attempts read it at every
    resumption point before applying a transition. Arming does not abort
    an already-dispatched transport call.
    """

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> bool:
        """Arm the token. Returns True only for the call that armed it."""
        if self._cancelled:
            return False
        self._cancelled = True
        return True

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"
