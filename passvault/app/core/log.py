# passvault/app/core/log.py
"""
Logging setup.

All modules log through the stdlib `logging` package with a module-level
logger. The trace id of the current request is kept in a ContextVar and
injected into every record by TraceIDFilter, so log lines emitted deep in the
services can be correlated with the access log entry of the request.
"""
import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Optional

TRACE_ID_HEADER = "X-Trace-Id"

_trace_id: ContextVar[str] = ContextVar("trace_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(trace_id)s] %(name)s: %(message)s"


def set_trace_id(trace_id: Optional[str] = None) -> str:
    """Bind a trace id to the current context, generating one if needed."""
    value = trace_id or uuid.uuid4().hex
    _trace_id.set(value)
    return value


class TraceIDFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = _trace_id.get()
        return True


def configure_logging(level: str = "INFO") -> None:
    """
    Install a single stream handler on the root logger.

    Safe to call more than once: an existing handler installed by this
    function is replaced, not duplicated.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_passvault", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(TraceIDFilter())
    handler._passvault = True
    root.addHandler(handler)
    root.setLevel(level.upper())
