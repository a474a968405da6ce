"""Structured logging for issuegraph (text or JSON lines on stderr).

stdout is reserved for command output (``render --stdout`` prints the DOT
document there), so every handler created here writes to stderr.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from .errors import redact

_STANDARD_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def _structured_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Attributes passed through ``extra``, in insertion order."""
    return {
        k: v
        for k, v in record.__dict__.items()
        if k not in _STANDARD_RECORD_ATTRS and not k.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for k, v in _structured_fields(record).items():
            entry.setdefault(k, v)
        return json.dumps(entry, default=str)


def _build_handler(json_logging: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_logging else logging.Formatter(_TEXT_FORMAT))
    return handler


class StructuredLogger:
    """Thin wrapper over a stdlib logger that attaches traversal context.

    In JSON mode consecutive identical events are dropped, so a worklist that
    names the same issue several times does not flood the log.
    """

    def __init__(
        self, name: str = "issuegraph", json_logging: bool = False, level: str = "WARNING"
    ) -> None:
        self._logger = logging.getLogger(name)
        self._logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
        for h in list(self._logger.handlers):
            self._logger.removeHandler(h)
        self._logger.addHandler(_build_handler(json_logging))
        self._logger.propagate = False
        self._dedupe_enabled = json_logging
        self._last_signature: tuple[int, str, tuple[tuple[str, str], ...]] | None = None

    def _emit(self, level: int, message: str, extra: dict[str, Any]) -> None:
        if self._dedupe_enabled:
            signature = (level, message, tuple(sorted((k, repr(v)) for k, v in extra.items())))
            if signature == self._last_signature:
                return
            self._last_signature = signature
        self._logger.log(level, message, extra=extra)

    def log_operation(self, operation: str, **kw: Any) -> None:
        self._emit(logging.INFO, f"Operation: {operation}", {"operation": operation, **kw})

    def log_issue_event(self, action: str, issue_id: str, **kw: Any) -> None:
        """Per-issue traversal progress (fetching / retained / stopped / skipped)."""
        extra: dict[str, Any] = {"operation": f"issue_{action}", "issue_id": issue_id, **kw}
        reason = kw.get("status")
        msg = f"issue {action} {issue_id}" + (f" ({reason})" if reason else "")
        self._emit(logging.INFO, msg, extra)

    def log_performance(self, operation: str, duration_ms: float, **kw: Any) -> None:
        extra = {"operation": operation, "duration_ms": round(duration_ms, 2), **kw}
        self._emit(logging.INFO, f"Performance: {operation} completed in {duration_ms:.2f}ms", extra)

    def log_error(self, message: str, error: str | None = None, **kw: Any) -> None:
        extra = dict(kw)
        if error:
            extra["error"] = error
        self._logger.error(message, extra=extra)

    def debug(self, message: str, **kw: Any) -> None:
        self._logger.debug(message, extra=kw)

    def warning(self, message: str, **kw: Any) -> None:
        self._logger.warning(message, extra=kw)

    @contextmanager
    def timed_operation(self, operation: str, **kw: Any) -> Iterator[None]:
        start = time.perf_counter()
        self.log_operation(f"{operation}_start", **kw)
        try:
            yield
        except Exception as exc:
            self.log_error(f"operation {operation} failed", error=redact(str(exc)), **kw)
            raise
        self.log_performance(operation, (time.perf_counter() - start) * 1000, **kw)


_GLOBAL: StructuredLogger | None = None


def get_logger() -> StructuredLogger:
    global _GLOBAL  # noqa: PLW0603
    if _GLOBAL is None:
        _GLOBAL = StructuredLogger()
    return _GLOBAL


def configure_logging(json_logging: bool = False, level: str = "WARNING") -> StructuredLogger:
    global _GLOBAL  # noqa: PLW0603
    _GLOBAL = StructuredLogger(json_logging=json_logging, level=level)
    return _GLOBAL


__all__ = ["JSONFormatter", "StructuredLogger", "configure_logging", "get_logger"]
