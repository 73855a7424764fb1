"""Telemetry helpers: tracer factory, log correlation and error sanitization."""

from __future__ import annotations

from rbac_manager.telemetry.logging import add_trace_context, configure_logging
from rbac_manager.telemetry.sanitization import (
    sanitize_error_message,
    sanitize_k8s_api_error,
)
from rbac_manager.telemetry.tracer_factory import get_tracer, reset_tracer, set_tracer

__all__ = [
    "add_trace_context",
    "configure_logging",
    "get_tracer",
    "reset_tracer",
    "sanitize_error_message",
    "sanitize_k8s_api_error",
    "set_tracer",
]
