"""fetchstate: observable, cancellable single HTTP retrievals."""

from __future__ import annotations

import warnings
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fetchstate")
except PackageNotFoundError:
    # Source-tree execution without installed package metadata.
    warnings.warn(
        "Package metadata for 'fetchstate' not found; using fallback version '0.0.0+unknown'.",
        RuntimeWarning,
        stacklevel=2,
    )
    __version__ = "0.0.0+unknown"

from fetchstate.controller import FetchController, retrieve  # noqa: E402
from fetchstate.errors import ErrorCode, ErrorInfo, FetchError  # noqa: E402
from fetchstate.models import Phase, RequestOptions, RetrievalState  # noqa: E402

__all__ = [
    "ErrorCode",
    "ErrorInfo",
    "FetchController",
    "FetchError",
    "Phase",
    "RequestOptions",
    "RetrievalState",
    "__version__",
    "retrieve",
]
