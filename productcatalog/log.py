"""Structured JSON logging.

Every line is a JSON object with ``timestamp``, ``severity`` and ``message``
keys. Request handlers bind ``trace_id``/``span_id`` of the active span so
log lines can be joined with traces.
"""
from __future__ import annotations

import logging
import sys

import structlog
from opentelemetry import trace


def _rename_level(_logger, _method: str, event_dict: dict) -> dict:
    event_dict["severity"] = event_dict.pop("level", "info")
    return event_dict


def configure_logging(level: str = "DEBUG") -> None:
    """Configure structlog once at process start."""
    numeric = getattr(logging, level.upper(), logging.DEBUG)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            _rename_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.processors.format_exc_info,
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        logger_factory=structlog.PrintLoggerFactory(sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    return structlog.get_logger(name)


def span_logger(log, span: trace.Span | None = None):
    """Bind the trace and span ids of ``span`` (default: current span)."""
    span = span or trace.get_current_span()
    ctx = span.get_span_context()
    if not ctx.is_valid:
        return log
    return log.bind(
        trace_id=trace.format_trace_id(ctx.trace_id),
        span_id=trace.format_span_id(ctx.span_id),
    )
