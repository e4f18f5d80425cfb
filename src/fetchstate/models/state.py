from __future__ import annotations

from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator

from fetchstate.errors import ErrorInfo

T = TypeVar("T")


class Phase(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    FETCHED = "fetched"
    FAILED = "failed"


class RetrievalState(BaseModel, Generic[T]):
    """Snapshot of a retrieval's progress, emitted on every transition."""

    model_config = ConfigDict(frozen=True)

    phase: Phase = Phase.IDLE
    data: T | None = None
    error: ErrorInfo | None = None

    @model_validator(mode="after")
    def _data_and_error_exclusive(self) -> RetrievalState[T]:
        if self.data is not None and self.error is not None:
            raise ValueError("RetrievalState cannot carry both data and error")
        return self

    @property
    def is_settled(self) -> bool:
        return self.phase in (Phase.FETCHED, Phase.FAILED)
