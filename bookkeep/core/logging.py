import logging
import sys
from contextvars import ContextVar
from typing import Final
from logging import LoggerAdapter, LogRecord
from typing_extensions import override
from fastapi import Request

_LOG_FORMAT: Final[str] = (
    "%(asctime)s %(levelname)s %(name)s :: %(message)s [req=%(request_id)s]"
)
_UVICORN_LOGGERS: Final[tuple[str, ...]] = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Set by CorrelationIdMiddleware for the lifetime of a request
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class RequestLogFilter(logging.Filter):
    """
    Stamps request_id on records that don't carry one, taking it from the
    current request context (or "-" outside a request).
    """

    @override
    def filter(self, record: LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        return True


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: int | str = logging.INFO) -> None:
    """
    One stdout handler shared by the root and uvicorn loggers.
    Accepts a level name ("debug", "INFO") as read from settings.
    """
    resolved = _resolve_level(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(resolved)
    handler.addFilter(RequestLogFilter())
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(resolved)
    root.addHandler(handler)

    for name in _UVICORN_LOGGERS:
        uv_logger = logging.getLogger(name)
        uv_logger.handlers.clear()
        uv_logger.setLevel(resolved)
        uv_logger.addHandler(handler)
        uv_logger.propagate = False


def get_logger(
    name: str,
    request: Request | None = None
) -> LoggerAdapter[logging.Logger]:
    """
    Logger bound to a request's correlation id.
    Usage: logger = get_logger(__name__, request)
    """
    request_id = request_id_var.get()
    if request is not None:
        request_id = getattr(request.state, "correlation_id", request_id)
    return LoggerAdapter(logging.getLogger(name), {"request_id": request_id})
