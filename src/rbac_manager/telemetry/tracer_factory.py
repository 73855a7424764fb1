"""Tracer factory for rbac-manager OpenTelemetry spans.

Tracers are created lazily and cached per instrumenting module name. If the
OpenTelemetry API cannot hand out a tracer (for example because global state
was corrupted by a test fixture), a NoOpTracer is returned instead so that
resolution never fails because of telemetry.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from opentelemetry import trace

if TYPE_CHECKING:
    from opentelemetry.trace import Tracer

DEFAULT_TRACER_NAME = "rbac_manager"

_tracers: dict[str, Tracer] = {}
_tracer_init_failed: bool = False
_lock = threading.Lock()


def get_tracer(name: str = DEFAULT_TRACER_NAME) -> Tracer:
    """Return the cached tracer for ``name``, creating it on first use.

    Args:
        name: Instrumenting module name.

    Returns:
        OpenTelemetry Tracer, or a NoOpTracer if initialization failed.

    Example:
        >>> tracer = get_tracer("rbac_manager.resolver")
        >>> with tracer.start_as_current_span("rbac_manager.resolve"):
        ...     pass
    """
    global _tracer_init_failed

    cached = _tracers.get(name)
    if cached is not None:
        return cached
    if _tracer_init_failed:
        return trace.NoOpTracer()

    with _lock:
        if name in _tracers:
            return _tracers[name]
        if _tracer_init_failed:
            return trace.NoOpTracer()
        try:
            tracer = trace.get_tracer(name)
        except Exception:
            _tracer_init_failed = True
            return trace.NoOpTracer()
        _tracers[name] = tracer
        return tracer


def set_tracer(name: str, tracer: Tracer | None) -> None:
    """Inject (or clear, with None) the tracer used for ``name``.

    Args:
        name: Instrumenting module name.
        tracer: Tracer to use, or None to drop the cached one.
    """
    with _lock:
        if tracer is None:
            _tracers.pop(name, None)
        else:
            _tracers[name] = tracer


def reset_tracer() -> None:
    """Drop all cached tracers and clear the failure flag."""
    global _tracer_init_failed
    with _lock:
        _tracers.clear()
        _tracer_init_failed = False


__all__ = ["DEFAULT_TRACER_NAME", "get_tracer", "set_tracer", "reset_tracer"]
