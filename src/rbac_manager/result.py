"""Result types for RBAC definition resolution.

Example:
    >>> from rbac_manager.result import ResolutionResult
    >>> result = ResolutionResult(definition="example")
    >>> result.total
    0
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from rbac_manager.schemas.resources import (
        ClusterRoleBindingResource,
        RoleBindingResource,
        ServiceAccountResource,
    )

EventLevel = Literal["debug", "info", "warning"]

SERVICE_ACCOUNTS_FILE = "serviceaccounts.yaml"
ROLE_BINDINGS_FILE = "rolebindings.yaml"
CLUSTER_ROLE_BINDINGS_FILE = "clusterrolebindings.yaml"

# Manifest file names, in the order they should be applied.
MANIFEST_FILES: tuple[str, ...] = (
    SERVICE_ACCOUNTS_FILE,
    ROLE_BINDINGS_FILE,
    CLUSTER_ROLE_BINDINGS_FILE,
)


@dataclass(frozen=True)
class ResolutionEvent:
    """A diagnostic trace record emitted while resolving a definition.

    Events describe progress only; callers must not derive decisions from
    them.

    Attributes:
        level: Severity of the event.
        event: Dotted event name (e.g. ``resolver.role_binding_resolved``).
        fields: Structured context, read-only.
    """

    level: EventLevel
    event: str
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))


@dataclass(frozen=True)
class ResolutionResult:
    """Objects produced by resolving one RBACDefinition.

    Built once at the end of a successful resolution; a failed resolution
    produces no result at all.

    Attributes:
        definition: Name of the resolved definition.
        service_accounts: ServiceAccounts, in binding/subject order.
        role_bindings: RoleBindings, in binding/spec/namespace order.
        cluster_role_bindings: ClusterRoleBindings, in binding/spec order.
        events: Diagnostic events emitted during resolution.
    """

    definition: str
    service_accounts: tuple[ServiceAccountResource, ...] = ()
    role_bindings: tuple[RoleBindingResource, ...] = ()
    cluster_role_bindings: tuple[ClusterRoleBindingResource, ...] = ()
    events: tuple[ResolutionEvent, ...] = ()

    @property
    def total(self) -> int:
        """Total number of produced objects."""
        return (
            len(self.service_accounts) + len(self.role_bindings) + len(self.cluster_role_bindings)
        )

    def to_manifests(self) -> dict[str, list[dict[str, Any]]]:
        """Render all objects grouped by manifest file name.

        Returns:
            Mapping of file name to manifest dicts, keyed in MANIFEST_FILES order.
        """
        return {
            SERVICE_ACCOUNTS_FILE: [sa.to_k8s_manifest() for sa in self.service_accounts],
            ROLE_BINDINGS_FILE: [rb.to_k8s_manifest() for rb in self.role_bindings],
            CLUSTER_ROLE_BINDINGS_FILE: [
                crb.to_k8s_manifest() for crb in self.cluster_role_bindings
            ],
        }

    def __str__(self) -> str:
        """Return human-readable summary of the resolution."""
        return "\n".join(
            [
                f"RBACDefinition {self.definition}:",
                f"  ServiceAccounts: {len(self.service_accounts)}",
                f"  RoleBindings: {len(self.role_bindings)}",
                f"  ClusterRoleBindings: {len(self.cluster_role_bindings)}",
            ]
        )


__all__ = [
    "EventLevel",
    "MANIFEST_FILES",
    "SERVICE_ACCOUNTS_FILE",
    "ROLE_BINDINGS_FILE",
    "CLUSTER_ROLE_BINDINGS_FILE",
    "ResolutionEvent",
    "ResolutionResult",
]
