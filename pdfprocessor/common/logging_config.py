"""
Structured JSON logging.

Every record is written as one JSON object, to the console and to
PDFPROCESSOR_LOG_FILE when it is set. Context of the calling thread (the
HTTP request id, the document being parsed) is added to each record by the
formatter; ``log_context`` carries it into the worker threads of a batch.
"""
import datetime
import json
import logging
import os
from contextlib import contextmanager
from threading import local
from typing import Any, Dict, Iterator, Optional

# Thread-local storage for context fields (request_id, source_file)
_context = local()

LOG_LEVEL_ENV = "PDFPROCESSOR_LOG_LEVEL"
LOG_FILE_ENV = "PDFPROCESSOR_LOG_FILE"
NO_REQUEST_ID = "GLOBAL"

# pdfminer logs every parsed object at DEBUG
QUIET_LOGGERS = ("pdfminer", "pdfplumber")


def _fields() -> Dict[str, Any]:
    fields = getattr(_context, "fields", None)
    if fields is None:
        fields = _context.fields = {}
    return fields


def current_context() -> Dict[str, Any]:
    """Copy of the context fields of the calling thread."""
    return dict(_fields())


@contextmanager
def log_context(**fields) -> Iterator[Dict[str, Any]]:
    """
    Attach fields to every record this thread logs inside the block.
    None values are ignored; the previous context is restored on exit.
    """
    ctx = _fields()
    saved = dict(ctx)
    ctx.update({k: v for k, v in fields.items() if v is not None})
    try:
        yield dict(ctx)
    finally:
        ctx.clear()
        ctx.update(saved)


def set_request_id(request_id: str):
    """Set the current request ID in context."""
    _fields()["request_id"] = request_id


def get_request_id() -> str:
    return _fields().get("request_id", NO_REQUEST_ID)


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record: fixed fields, thread context, then the
    ``extra_fields`` of the call (which win over context on a clash).
    """
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "request_id": NO_REQUEST_ID,
        }
        log_data.update(_fields())

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            log_data.update(extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
            log_data["error_type"] = record.exc_info[0].__name__ if record.exc_info[0] else None

        return json.dumps(log_data, ensure_ascii=False, default=str)


def _resolve_level(log_level: Optional[int]) -> int:
    if log_level is not None:
        return log_level
    level = logging.getLevelName(os.getenv(LOG_LEVEL_ENV, "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _json_handler(handler: logging.Handler) -> logging.Handler:
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(log_level: Optional[int] = None, log_file: Optional[str] = None):
    """
    Configure global logging settings.

    Level and file default to PDFPROCESSOR_LOG_LEVEL / PDFPROCESSOR_LOG_FILE;
    without a file only the console handler is installed. Calling it again
    replaces the handlers instead of adding more.
    """
    log_level = _resolve_level(log_level)
    if log_file is None:
        log_file = os.getenv(LOG_FILE_ENV) or None

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        if isinstance(handler.formatter, JSONFormatter):
            handler.close()

    root_logger.addHandler(_json_handler(logging.StreamHandler()))
    if log_file:
        if os.path.dirname(log_file):
            os.makedirs(os.path.dirname(log_file), exist_ok=True)
        root_logger.addHandler(_json_handler(logging.FileHandler(log_file, encoding='utf-8')))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    logging.info("Logging infrastructure initialized.",
                 extra={"extra_fields": {"status": "ready", "log_file": log_file}})


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """
    Adapter that turns keyword arguments into JSON fields:
    ``logger.info("Page skipped", page=3, source_file="a.pdf")``.
    """
    STANDARD_ARGS = frozenset({'exc_info', 'stack_info', 'stacklevel', 'extra'})

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        extra = dict(kwargs.get("extra") or {})
        fields = dict(extra.get("extra_fields") or {})

        new_kwargs = {}
        for key, value in kwargs.items():
            if key in self.STANDARD_ARGS:
                new_kwargs[key] = value
            elif key == "extra_fields" and isinstance(value, dict):
                fields.update(value)
            else:
                fields[key] = value

        extra["extra_fields"] = fields
        new_kwargs["extra"] = extra
        return msg, new_kwargs


def get_logger(name: str) -> StructuredLoggerAdapter:
    return StructuredLoggerAdapter(logging.getLogger(name), {})
