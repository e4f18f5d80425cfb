from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ErrorCode(StrEnum):
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    APPLICATION_ERROR = "APPLICATION_ERROR"


class ErrorInfo(BaseModel):
    """Failure details carried by a ``failed`` RetrievalState."""

    model_config = ConfigDict(frozen=True)

    code: ErrorCode
    message: str = Field(min_length=1)
    status_code: int | None = None  # Set whenever a response was received

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorInfo:
        """Normalise an arbitrary exception raised by a transport."""
        if isinstance(exc, FetchError):
            return exc.to_error_info()
        return cls(
            code=ErrorCode.TRANSPORT_ERROR,
            message=str(exc) or type(exc).__name__,
        )


class FetchError(Exception):
    """Raised for every expected retrieval failure.

    Transports raise it for network-level failures; the controller raises it
    internally for non-success responses and undecodable bodies. It never
    escapes a FetchController: each attempt catches it and converts it into
    an ``ErrorInfo`` on the ``failed`` state.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        *,
        status_code: int | None = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.recoverable = recoverable

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            code=self.code,
            message=self.message or type(self).__name__,
            status_code=self.status_code,
        )
