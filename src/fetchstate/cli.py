"""Command-line entrypoint: ``fetchstate TARGET``.

Responsibilities (and nothing more):
- Configure structlog
- Build the shared httpx client and HttpTransport from Settings
- Run one retrieval through a FetchController and print the settled state

stdout carries the RetrievalState as JSON; logs go to stderr. Exit status is
0 when fetched, 1 when failed and 2 when nothing was retrieved.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import structlog

from fetchstate import __version__
from fetchstate.config import Settings
from fetchstate.controller import FetchController
from fetchstate.models import Phase, RequestOptions, RetrievalState
from fetchstate.transport import HttpTransport, build_http_client

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # stdout is reserved for the state document
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


def _parse_header(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"Expected NAME:VALUE, got {raw!r}")
    return name.strip(), value.strip()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fetchstate",
        description="Retrieve a JSON resource and print the resulting retrieval state.",
    )
    parser.add_argument("target", help="URL, or path relative to transport.base_url")
    parser.add_argument(
        "--method",
        default="GET",
        choices=["GET", "POST", "PUT", "PATCH", "DELETE"],
    )
    parser.add_argument(
        "--header",
        action="append",
        default=[],
        type=_parse_header,
        metavar="NAME:VALUE",
        help="Extra request header (repeatable)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


async def run(target: str, options: RequestOptions, settings: Settings) -> RetrievalState:
    async with build_http_client(settings.transport) as client:
        transport = HttpTransport(client)
        async with FetchController(
            transport,
            target,
            options,
            use_cache=settings.controller.cache_enabled,
        ) as controller:
            return await controller.wait()


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = Settings()
    _setup_logging(settings)

    options = RequestOptions(method=args.method, headers=dict(args.header))
    state = asyncio.run(run(args.target, options, settings))

    print(state.model_dump_json(indent=2))
    if not state.is_settled:
        # Empty target: nothing was retrieved
        log.warning("fetch_not_started", target=args.target, phase=state.phase)
        return 2
    return 0 if state.phase == Phase.FETCHED else 1


if __name__ == "__main__":
    sys.exit(main())
