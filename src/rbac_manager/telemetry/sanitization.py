"""Sanitize error text before it reaches spans, logs or CLI output.

Kubernetes client exceptions carry response bodies and headers that may
include bearer tokens. Only the status code and reason are kept.
"""

from __future__ import annotations

import re

_SENSITIVE_KEY_PATTERN = re.compile(
    r"(password|token|api_key|authorization|bearer|credential)\s*[=:]\s*\S+",
    re.IGNORECASE,
)
_URL_CREDENTIAL_PATTERN = re.compile(r"://[^@/\s]+:[^@/\s]+@")


def sanitize_error_message(msg: str, max_length: int = 500) -> str:
    """Redact credentials from an error message and truncate it.

    Args:
        msg: Raw error message.
        max_length: Maximum length of the returned message.

    Returns:
        Sanitized and truncated message.

    Example:
        >>> sanitize_error_message("Unauthorized: token=abc123")
        'Unauthorized: token=<REDACTED>'
    """
    sanitized = _URL_CREDENTIAL_PATTERN.sub("://<REDACTED>@", msg)

    def _redact(match: re.Match[str]) -> str:
        text = match.group(0)
        if "=" in text:
            return text.split("=", 1)[0] + "=<REDACTED>"
        return text.split(":", 1)[0] + ": <REDACTED>"

    sanitized = _SENSITIVE_KEY_PATTERN.sub(_redact, sanitized)
    return sanitized[:max_length]


def sanitize_k8s_api_error(exc: BaseException) -> str:
    """Describe a Kubernetes API exception by status and reason only.

    Args:
        exc: Exception raised by the kubernetes client (ApiException expected).

    Returns:
        Safe description such as ``"Forbidden (HTTP 403)"``.
    """
    status = getattr(exc, "status", None)
    reason = getattr(exc, "reason", None)

    if status is not None and reason is not None:
        return f"{reason} (HTTP {status})"
    if reason is not None:
        return str(reason)
    return type(exc).__name__


__all__ = ["sanitize_error_message", "sanitize_k8s_api_error"]
