from __future__ import annotations

"""
ucp_schema.core.log
===================

Structured logging for the library, built on stdlib ``logging``:
- Silent by default (NullHandler on the ``ucp_schema`` logger).
- Context propagation via contextvars (schema source, direction, operation).
- JSON formatter for automation; human formatter for local debugging.
- Logger adapter that accepts arbitrary keyword fields:
      log.debug("bundle.inline", event="bundle.inline", ref=ref, depth=3)
"""

import contextvars
import json
import logging
import os
import sys
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, ClassVar, Final, TextIO

__all__ = [
    "bind_context",
    "configure_from_env",
    "disable_stdout_logging",
    "enable_stdout_logging",
    "get_logger",
    "log_context",
    "set_level",
]

# ---------- Context ----------

_log_context: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "ucp_schema_log_ctx", default=None
)


def _ctx_copy() -> dict[str, Any]:
    ctx = _log_context.get()
    return dict(ctx) if ctx else {}


def bind_context(**fields: Any) -> None:
    """Merge fields into the current structured log context (None values are dropped)."""
    ctx = _ctx_copy()
    ctx.update({k: v for k, v in fields.items() if v is not None})
    _log_context.set(ctx)


@contextmanager
def log_context(**fields: Any):
    """
    Temporarily add fields to the structured log context.
    Restores the previous context on exit.
    """
    token = _log_context.set({**_ctx_copy(), **{k: v for k, v in fields.items() if v is not None}})
    try:
        yield
    finally:
        _log_context.reset(token)


# ---------- Formatters ----------

_STD_ATTRS: Final[frozenset[str]] = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "asctime",
        "taskName",
    }
)

# Context keys shown by the human formatter.
_HUMAN_KEYS: Final[tuple[str, ...]] = ("source", "direction", "operation", "capability")


def _iso_utc_ms(ts: float) -> str:
    dt = datetime.fromtimestamp(ts, tz=UTC)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _exc_tuple(record: logging.LogRecord):
    if isinstance(record.exc_info, BaseException):
        e = record.exc_info
        return (type(e), e, e.__traceback__)
    if record.exc_info is True:
        return sys.exc_info()
    if isinstance(record.exc_info, tuple):
        return record.exc_info
    return None


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record: ts, level, logger, message, context fields,
    extra fields and (optionally) the exception.
    """

    def __init__(self, *, include_stack: bool = False) -> None:
        super().__init__()
        self.include_stack = include_stack

    def format(self, record: logging.LogRecord) -> str:
        out: dict[str, Any] = {
            "ts": _iso_utc_ms(record.created),
            "level": record.levelname,
            "logger": record.name,
        }

        msg = record.getMessage()
        if msg:
            out["message"] = msg

        ctx = _log_context.get()
        if ctx:
            out.update(ctx)

        for k, v in record.__dict__.items():
            if k in _STD_ATTRS:
                continue
            if k not in out:
                out[k] = v

        exc = _exc_tuple(record)
        if exc:
            out["error"] = {
                "type": exc[0].__name__ if exc[0] else "Exception",
                "message": str(exc[1]) if exc[1] else None,
            }
            if self.include_stack:
                out["error"]["stack"] = self.formatException(exc)

        return json.dumps(out, ensure_ascii=False, separators=(",", ":"), default=str)


class HumanFormatter(logging.Formatter):
    """Compact human-friendly formatter for local debugging."""

    default_time_format = "%Y-%m-%d %H:%M:%S"
    default_msec_format = "%s.%03d"

    def format(self, record: logging.LogRecord) -> str:
        s = f"{self.formatTime(record)} {record.levelname:<5} {record.name}: {record.getMessage()}"
        ctx = _log_context.get()
        if ctx:
            compact = {k: ctx.get(k) for k in _HUMAN_KEYS if ctx.get(k) is not None}
            if compact:
                s += "  [" + ", ".join(f"{k}={v}" for k, v in compact.items()) + "]"
        exc = _exc_tuple(record)
        if exc:
            s += "\n" + self.formatException(exc)
        return s


class ContextFilter(logging.Filter):
    """Inject current log context into LogRecord for downstream handlers."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = _log_context.get()
        if ctx:
            for k, v in ctx.items():
                if not hasattr(record, k):
                    setattr(record, k, v)
        return True


class _KwExtraAdapter(logging.LoggerAdapter):
    """Moves unknown kwargs into ``extra={...}`` so structured fields can be passed inline."""

    _allowed_passthrough: ClassVar[frozenset[str]] = frozenset({"exc_info", "stack_info", "stacklevel", "extra"})

    def process(self, msg, kwargs):
        extra = kwargs.get("extra")
        if not isinstance(extra, dict):
            extra = {}

        for k in list(kwargs.keys()):
            if k in self._allowed_passthrough:
                continue
            v = kwargs.pop(k)
            key = f"field_{k}" if k in _STD_ATTRS else k
            extra.setdefault(key, v)

        kwargs["extra"] = extra
        return msg, kwargs


# ---------- Public configuration API ----------

_LOGGER_NAME = "ucp_schema"
_configured = False
_stream_handler_key = "_ucp_schema_stream_handler"


def _truthy_env(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes", "on")


def _level_number(level: int | str) -> int:
    if isinstance(level, int):
        return level
    lvl = logging.getLevelName(level.upper())
    if isinstance(lvl, str):
        raise ValueError(f"Invalid level name: {level!r}")
    return lvl


def get_logger(name: str | None = None) -> logging.LoggerAdapter:
    """
    Return a namespaced logger adapter that accepts arbitrary keyword fields.
    Silent unless a handler is attached (see enable_stdout_logging).
    """
    _bootstrap_minimal()
    base = logging.getLogger(_LOGGER_NAME)
    target = base.getChild(name) if name else base
    return _KwExtraAdapter(target, {})


def _bootstrap_minimal() -> None:
    global _configured
    if _configured:
        return
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(logging.WARNING)
    if not any(isinstance(h, logging.NullHandler) for h in lg.handlers):
        lg.addHandler(logging.NullHandler())
    if not any(isinstance(f, ContextFilter) for f in lg.filters):
        lg.addFilter(ContextFilter())
    _configured = True


def set_level(level: int | str) -> None:
    """Change the library logger level at runtime (affects children)."""
    logging.getLogger(_LOGGER_NAME).setLevel(_level_number(level))


def _make_formatter(*, json_output: bool, include_stack: bool, pretty: bool) -> logging.Formatter:
    if pretty:
        return HumanFormatter()
    if json_output:
        return JsonFormatter(include_stack=include_stack)
    return logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")


def enable_stdout_logging(
    *,
    level: int | str = logging.INFO,
    json_output: bool = True,
    include_stack: bool = False,
    pretty: bool = False,
    stream: TextIO | None = None,
) -> None:
    """
    Attach one stream handler to the library logger (replacing a previous one).
    pretty wins over json_output; ``stream`` defaults to stdout, pass
    sys.stderr when stdout carries resolved schemas.
    """
    lvl = _level_number(level)
    _bootstrap_minimal()
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(lvl)
    disable_stdout_logging()

    h = logging.StreamHandler(stream if stream is not None else sys.stdout)
    h.set_name(_stream_handler_key)
    h.setLevel(lvl)
    h.setFormatter(_make_formatter(json_output=json_output, include_stack=include_stack, pretty=pretty))
    lg.addHandler(h)


def disable_stdout_logging() -> None:
    """Detach the handler installed by enable_stdout_logging, if any."""
    lg = logging.getLogger(_LOGGER_NAME)
    for h in list(lg.handlers):
        if h.get_name() == _stream_handler_key:
            lg.removeHandler(h)


def configure_from_env() -> None:
    """
    Optional: call once in application entrypoints/tests.
    Honors:
      - UCP_SCHEMA_LOG_STDOUT=1|true -> enable stdout
      - UCP_SCHEMA_LOG_LEVEL=DEBUG|INFO|...
      - UCP_SCHEMA_LOG_PRETTY=1 -> human formatter instead of JSON
      - UCP_SCHEMA_LOG_STACK=1 -> include stack in JSON logs
    """
    level = os.getenv("UCP_SCHEMA_LOG_LEVEL", "WARNING")
    pretty = _truthy_env("UCP_SCHEMA_LOG_PRETTY")

    _bootstrap_minimal()
    set_level(level)

    if _truthy_env("UCP_SCHEMA_LOG_STDOUT"):
        enable_stdout_logging(
            level=level,
            json_output=not pretty,
            include_stack=_truthy_env("UCP_SCHEMA_LOG_STACK"),
            pretty=pretty,
        )
    else:
        disable_stdout_logging()


_bootstrap_minimal()
