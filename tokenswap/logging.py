"""
Structured logging setup.

Configures **structlog** on top of the stdlib ``logging`` package so that
host-side diagnostics (commits, rollbacks, sequence changes) are emitted as
structured events, JSON by default or a console renderer for local work.

Quick start
-----------
    from tokenswap.logging import setup_logging, get_logger

    setup_logging()  # call once on process start
    log = get_logger(__name__)
    log.info("pool_deployed", address=pool.address)

Environment
-----------
- TOKENSWAP_LOG_LEVEL: one of DEBUG, INFO, WARNING, ERROR (default: INFO)
- TOKENSWAP_LOG_FORMAT: "json" (default) or "console"

Until `setup_logging()` runs, events go through stdlib `logging` under the
`tokenswap` logger names and obey whatever levels and handlers the embedding
process has set (nothing below WARNING is shown by default).

Domain events (mint, transfer, swap, ...) are not log lines: they are
published to the host's event log.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Iterable, Optional

import structlog
from structlog.contextvars import merge_contextvars
from structlog.processors import JSONRenderer


def _base_processors(service_name: str) -> Iterable:
    yield structlog.stdlib.add_log_level
    yield structlog.processors.TimeStamper(fmt="iso", utc=True)
    yield merge_contextvars
    yield structlog.processors.StackInfoRenderer()
    yield structlog.processors.format_exc_info
    yield structlog.processors.UnicodeDecoder()

    def _ensure_service(_: logging.Logger, __: str, ev: Dict[str, Any]) -> Dict[str, Any]:
        ev.setdefault("service", service_name)
        return ev

    yield _ensure_service


def setup_logging(
    *,
    service_name: str = "tokenswap",
    level: Optional[str | int] = None,
    log_format: Optional[str] = None,
) -> None:
    """
    Configure structlog + stdlib logging. Safe to call more than once.

    Parameters
    ----------
    service_name: str
        Value injected as "service" into every event.
    level: str|int
        Log level. Defaults to $TOKENSWAP_LOG_LEVEL or INFO.
    log_format: str
        "json" or "console". Defaults to $TOKENSWAP_LOG_FORMAT or "json".
    """
    env_level = os.getenv("TOKENSWAP_LOG_LEVEL", "").upper() or None
    env_format = os.getenv("TOKENSWAP_LOG_FORMAT", "").lower() or None

    level = level or env_level or "INFO"
    if isinstance(level, str):
        level = level.upper()
    log_format = (log_format or env_format or "json").lower()
    if log_format not in ("json", "console"):
        raise ValueError(f"unsupported log format: {log_format!r}")

    processors = list(_base_processors(service_name))
    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=False, sort_keys=False)
    else:
        renderer = JSONRenderer(sort_keys=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            *processors,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger("tokenswap")
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.propagate = False


def _configure_stdlib_default() -> None:
    # Route through stdlib logging until setup_logging() is called, so an
    # unconfigured embedding only sees what its own logging levels allow.
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            *_base_processors("tokenswap"),
            JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
    )


def get_logger(name: Optional[str] = None) -> Any:
    """Return a stdlib-backed structlog logger bound to `name`."""
    return structlog.stdlib.get_logger(name)


if not structlog.is_configured():
    _configure_stdlib_default()


__all__ = [
    "setup_logging",
    "get_logger",
]
