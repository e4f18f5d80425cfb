from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]


class RequestOptions(BaseModel):
    """Per-request configuration handed through to the transport."""

    model_config = ConfigDict(frozen=True)

    method: HttpMethod = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, str] = Field(default_factory=dict)
    json_body: Any = None
    timeout_seconds: float | None = None  # None → client default


class RequestDescriptor(BaseModel):
    """Target plus options for one retrieval attempt."""

    model_config = ConfigDict(frozen=True)

    target: str = Field(min_length=1)
    options: RequestOptions | None = None

    @property
    def cache_key(self) -> str:
        # Options never take part in cache identity
        return self.target
