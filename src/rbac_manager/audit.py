"""Audit logging for RBAC definition resolution.

Every call to the resolver produces exactly one audit event recording the
outcome and the number of objects produced, so that operators can trace which
definitions were resolved and why a resolution was refused.

Example:
    >>> from rbac_manager.audit import ResolutionAuditEvent, log_resolution_event
    >>> event = ResolutionAuditEvent.create_success(
    ...     definition="example",
    ...     service_accounts=1,
    ...     role_bindings=2,
    ...     cluster_role_bindings=0,
    ... )
    >>> log_resolution_event(event)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("rbac_manager.audit")


class ResolutionOutcome(str, Enum):
    """Outcome of a resolution attempt."""

    SUCCESS = "success"
    """All bindings resolved."""

    VALIDATION_ERROR = "validation_error"
    """The definition contained an invalid binding."""

    LOOKUP_ERROR = "lookup_error"
    """The namespace directory query failed."""


class ResolutionAuditEvent(BaseModel):
    """Audit record of one resolution attempt.

    Attributes:
        timestamp: When the resolution finished.
        outcome: Result of the resolution.
        definition: Name of the RBACDefinition.
        binding: Offending binding name for validation errors.
        bindings: Number of bindings in the definition.
        service_accounts: Number of ServiceAccounts produced.
        role_bindings: Number of RoleBindings produced.
        cluster_role_bindings: Number of ClusterRoleBindings produced.
        error: Sanitized error message on failure.
        trace_id: OpenTelemetry trace ID for correlation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    timestamp: datetime = Field(..., description="When the resolution finished")
    outcome: ResolutionOutcome = Field(..., description="Result of the resolution")
    definition: str = Field(..., description="RBACDefinition name")
    binding: str | None = Field(default=None, description="Offending binding name")
    bindings: int = Field(default=0, ge=0, description="Bindings in the definition")
    service_accounts: int = Field(default=0, ge=0)
    role_bindings: int = Field(default=0, ge=0)
    cluster_role_bindings: int = Field(default=0, ge=0)
    error: str | None = Field(default=None, description="Sanitized error message")
    trace_id: str | None = Field(default=None, description="OpenTelemetry trace ID")

    def to_log_dict(self) -> dict[str, Any]:
        """Convert to a dictionary suitable for structured logging."""
        result: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "outcome": self.outcome.value,
            "definition": self.definition,
            "bindings": self.bindings,
            "service_accounts": self.service_accounts,
            "role_bindings": self.role_bindings,
            "cluster_role_bindings": self.cluster_role_bindings,
            "total_resources": (
                self.service_accounts + self.role_bindings + self.cluster_role_bindings
            ),
        }
        if self.binding:
            result["binding"] = self.binding
        if self.error:
            result["error"] = self.error
        if self.trace_id:
            result["trace_id"] = self.trace_id
        return result

    @classmethod
    def create_success(
        cls,
        *,
        definition: str,
        bindings: int = 0,
        service_accounts: int = 0,
        role_bindings: int = 0,
        cluster_role_bindings: int = 0,
        trace_id: str | None = None,
    ) -> ResolutionAuditEvent:
        """Create the audit event of a successful resolution."""
        return cls(
            timestamp=datetime.now(timezone.utc),
            outcome=ResolutionOutcome.SUCCESS,
            definition=definition,
            bindings=bindings,
            service_accounts=service_accounts,
            role_bindings=role_bindings,
            cluster_role_bindings=cluster_role_bindings,
            trace_id=trace_id,
        )

    @classmethod
    def create_failure(
        cls,
        *,
        outcome: ResolutionOutcome,
        definition: str,
        error: str,
        binding: str | None = None,
        bindings: int = 0,
        trace_id: str | None = None,
    ) -> ResolutionAuditEvent:
        """Create the audit event of a refused resolution.

        Failed resolutions produce nothing, so all resource counts are zero.
        """
        return cls(
            timestamp=datetime.now(timezone.utc),
            outcome=outcome,
            definition=definition,
            binding=binding,
            bindings=bindings,
            error=error,
            trace_id=trace_id,
        )


def log_resolution_event(event: ResolutionAuditEvent) -> None:
    """Log a resolution audit event.

    Successful resolutions are logged at INFO, failures at ERROR, both on
    the ``rbac_manager.audit`` logger.

    Args:
        event: The audit event to log.
    """
    if event.outcome is ResolutionOutcome.SUCCESS:
        logger.info(
            "RBACDefinition resolution %s",
            event.outcome.value,
            extra={"audit_event": event.to_log_dict()},
        )
    else:
        logger.error(
            "RBACDefinition resolution %s",
            event.outcome.value,
            extra={"audit_event": event.to_log_dict()},
        )


__all__ = [
    "ResolutionOutcome",
    "ResolutionAuditEvent",
    "log_resolution_event",
]
