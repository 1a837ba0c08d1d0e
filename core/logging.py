# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with run context
# PURPOSE: Tag every sync log line with run, schema, table and operation
# ============================================================================
"""
Structured Logging

Every sync run pushes a context (run_id, schema) and every applied operation
pushes a nested one (table, operation). Formatters and ContextLogger read the
innermost context, so log lines can be filtered per run or per table without
threading identifiers through every call.

Output is human-readable by default and JSON when LOG_FORMAT=json.

Usage:
    from core.logging import ComponentType, get_logger, log_context

    logger = get_logger(__name__, ComponentType.EXECUTOR)

    with log_context(run_id="sync-1a2b", schema="public"):
        with log_context(table="Invoice", operation="addColumn"):
            logger.info("Adding column total")
"""

import json
import logging
import os
import sys
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Union


class ComponentType(str, Enum):
    """Sync components, attached to each record as `component`."""
    CATALOG = "catalog"
    EXECUTOR = "executor"
    SYNCHRONIZER = "synchronizer"
    DOCTYPES = "doctypes"
    CLI = "cli"


# Named context fields, in output order
CONTEXT_FIELDS = ("run_id", "schema", "table", "operation", "component")

# Fields shown inline by HumanFormatter, with their short labels
HUMAN_LABELS = (("run_id", "run"), ("table", "table"), ("operation", "op"))


# ============================================================================
# CONTEXT
# ============================================================================

@dataclass(frozen=True)
class LogContext:
    """One level of logging context. Unset fields inherit from the parent."""
    run_id: Optional[str] = None
    schema: Optional[str] = None
    table: Optional[str] = None
    operation: Optional[str] = None
    component: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def merged(self, **fields) -> "LogContext":
        extra = {**self.extra, **fields.pop("extra", {})}
        unknown = sorted(set(fields) - set(CONTEXT_FIELDS))
        if unknown:
            raise TypeError(f"Unknown log context fields: {unknown}")
        return replace(self, extra=extra, **fields)

    def to_dict(self) -> Dict[str, Any]:
        """Set fields only, with `extra` flattened in."""
        data = {
            name: getattr(self, name)
            for name in CONTEXT_FIELDS
            if getattr(self, name) is not None
        }
        data.update(self.extra)
        return data


_local = threading.local()


def _stack() -> List[LogContext]:
    if not hasattr(_local, "stack"):
        _local.stack = []
    return _local.stack


def get_current_context() -> LogContext:
    """Innermost context of the current thread (empty outside any block)."""
    stack = _stack()
    return stack[-1] if stack else LogContext()


@contextmanager
def log_context(**fields) -> Iterator[LogContext]:
    """
    Push a context for the duration of the block.

    Args:
        **fields: Any of CONTEXT_FIELDS, plus an optional `extra` dict

    Example:
        with log_context(run_id="sync-1a2b", operation="addColumn"):
            logger.info("Applying operation")
    """
    context = get_current_context().merged(**fields)
    stack = _stack()
    stack.append(context)
    try:
        yield context
    finally:
        stack.pop()


# ============================================================================
# FORMATTERS
# ============================================================================

def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _record_data(record: logging.LogRecord) -> Dict[str, Any]:
    """Data attached by ContextLogger or log_checkpoint (empty if none)."""
    return getattr(record, "extra", None) or {}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation."""

    def __init__(
        self,
        include_timestamp: bool = True,
        include_level: bool = True,
        include_logger: bool = True,
        include_context: bool = True,
    ):
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_level = include_level
        self.include_logger = include_logger
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {}
        if self.include_timestamp:
            entry["timestamp"] = _utc_now().isoformat()
        if self.include_level:
            entry["level"] = record.levelname
        if self.include_logger:
            entry["logger"] = record.name
        entry["message"] = record.getMessage()

        context = get_current_context().to_dict() if self.include_context else {}
        if context:
            entry["context"] = context

        data = _record_data(record)
        if data:
            entry["data"] = data
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Single-line output with the run/table/op context inline."""

    def format(self, record: logging.LogRecord) -> str:
        context = get_current_context()
        tags = [
            f"{label}={getattr(context, name)}"
            for name, label in HUMAN_LABELS
            if getattr(context, name)
        ]
        prefix = " ".join([
            _utc_now().strftime("%Y-%m-%d %H:%M:%S"),
            record.levelname.ljust(8),
            record.name,
        ])
        if tags:
            prefix += f" [{', '.join(tags)}]"

        line = f"{prefix}: {record.getMessage()}"
        data = _record_data(record)
        if data:
            line += f" {data}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


# ============================================================================
# LOGGERS
# ============================================================================

class ContextLogger(logging.LoggerAdapter):
    """
    Adapter copying the current context and the logger's component onto
    each record as `record.extra`.
    """

    def process(self, msg, kwargs):
        passed = kwargs.get("extra") or {}
        # log_checkpoint hands over an already wrapped payload
        data = dict(passed.get("extra", passed))
        data.update(get_current_context().to_dict())

        component = (self.extra or {}).get("component")
        if component:
            data.setdefault("component", component)

        kwargs["extra"] = {"extra": data}
        return msg, kwargs


def get_logger(
    name: str,
    component: Optional[ComponentType] = None,
) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name, usually __name__
        component: Component tag for every record from this logger
    """
    return ContextLogger(
        logging.getLogger(name),
        {"component": component.value if component is not None else None},
    )


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
    stream=None,
) -> None:
    """
    Replace the root handlers with one stream handler.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Use JSON format (also enabled by LOG_FORMAT=json)
        stream: Output stream (defaults to stdout)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    use_json = json_output or os.getenv("LOG_FORMAT", "").lower() == "json"

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredFormatter() if use_json else HumanFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)


# ============================================================================
# CHECKPOINTS AND TIMING
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a named run milestone ("sync_started", "sync_completed").

    The record carries the checkpoint name, the current run_id/schema and
    the optional data.
    """
    logger = logger or logging.getLogger("checkpoint")

    checkpoint: Dict[str, Any] = {
        "checkpoint": name,
        "timestamp": _utc_now().isoformat(),
    }
    context = get_current_context()
    for key in ("run_id", "schema"):
        if getattr(context, key):
            checkpoint[key] = getattr(context, key)
    if data:
        checkpoint["data"] = data

    logger.info(f"CHECKPOINT: {name}", extra={"extra": checkpoint})


@contextmanager
def log_duration(
    logger,
    label: str,
    level: int = logging.DEBUG,
) -> Iterator[Dict[str, float]]:
    """
    Time a block and log how long it took.

    Yields a dict that holds `duration_ms` once the block exits, even when
    it raises.
    """
    timing: Dict[str, float] = {}
    start = time.perf_counter()
    try:
        yield timing
    finally:
        timing["duration_ms"] = round((time.perf_counter() - start) * 1000, 2)
        logger.log(level, f"{label} took {timing['duration_ms']}ms")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "CONTEXT_FIELDS",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
    "log_duration",
]
