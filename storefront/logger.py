"""Structured logging configuration using structlog.

Locally logs render as one uvicorn-style line per event; with
``LOG_FORMAT=json`` every event is a JSON object for log shipping.
"""

import logging
import os
import socket

import structlog
from structlog.processors import CallsiteParameter, CallsiteParameterAdder

from storefront.config import settings

_HOSTNAME = socket.gethostname()
_PID = os.getpid()


def _caller(event_dict: dict) -> str:
    filename = event_dict.pop("filename", "")
    func_name = event_dict.pop("func_name", "")
    lineno = event_dict.pop("lineno", "")
    if not filename:
        return ""
    return f"{filename}:{func_name}:{lineno}"


def _render_console(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict,
) -> str:
    """
    Render one event in Uvicorn log style.

    Produces output like: INFO:     [hostname:pid] cache ns=catalog hit 0.412ms
    """
    level = event_dict.pop("level", "info").upper()
    event = event_dict.pop("event", "")
    caller = _caller(event_dict)

    prefix = f"{level}:     [{_HOSTNAME}:{_PID}]"
    if caller:
        prefix = f"{prefix} [{caller}]"

    if event == "cache":
        parts = [f"ns={event_dict.pop('namespace', '-')}", str(event_dict.pop("cache_event", ""))]
        if "duration_ms" in event_dict:
            parts.append(f"{event_dict.pop('duration_ms')}ms")
    elif event == "request_perf":
        parts = [
            f"{event_dict.pop('method', '')} {event_dict.pop('path', '')}",
            f"{event_dict.pop('status', '')}",
            f"{event_dict.pop('duration_ms', '')}ms",
        ]
    else:
        parts = []
    parts.extend(f"{k}={v}" for k, v in event_dict.items())

    return " ".join([prefix, event, *parts]).rstrip()


def _add_host(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    event_dict["host"] = f"{_HOSTNAME}:{_PID}"
    return event_dict


def _renderer():
    if settings.log_format == "json":
        return structlog.processors.JSONRenderer(sort_keys=True)
    return _render_console


def setup_logging() -> None:
    """
    Configure structlog for the application.

    Debug mode lowers the level to DEBUG (cache hits and misses become
    visible) and adds the call site to every event.
    """
    log_level = logging.DEBUG if settings.debug else logging.INFO

    # AccessLogMiddleware writes the access lines
    uvicorn_access = logging.getLogger("uvicorn.access")
    uvicorn_access.handlers = []
    uvicorn_access.propagate = False
    uvicorn_access.disabled = True

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
    ]
    if settings.debug:
        processors.append(
            CallsiteParameterAdder(
                [CallsiteParameter.FILENAME, CallsiteParameter.FUNC_NAME, CallsiteParameter.LINENO]
            )
        )
    if settings.log_format == "json":
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
        processors.append(_add_host)
    processors.append(_renderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Logger for a module, usually ``get_logger(__name__)``."""
    return structlog.get_logger(name)


def _outcome_from_status(status_code: int) -> str:
    if status_code < 400:
        return "success"
    if status_code < 500:
        return "client_error"
    return "server_error"


def log_request_performance(
    *,
    request_id: str,
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    cache_delta: dict | None = None,
) -> None:
    """Emit one ``request_perf`` event with the cache events the request caused."""
    payload: dict[str, object] = {
        "request_id": request_id,
        "method": method,
        "path": path,
        "status": status_code,
        "outcome": _outcome_from_status(status_code),
        "duration_ms": round(duration_ms, 3),
    }
    if cache_delta:
        payload["cache_delta"] = cache_delta

    get_logger("storefront.performance").info("request_perf", **payload)
