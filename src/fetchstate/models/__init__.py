from __future__ import annotations

from fetchstate.models.request import HttpMethod, RequestDescriptor, RequestOptions
from fetchstate.models.state import Phase, RetrievalState

__all__ = [
    # request
    "HttpMethod",
    "RequestDescriptor",
    "RequestOptions",
    # state
    "Phase",
    "RetrievalState",
]
