"""Kubernetes authorization objects produced by resolution.

Each resource is a frozen Pydantic model with a ``to_k8s_manifest()`` method
that renders a valid Kubernetes manifest dictionary. Metadata for every
resource is produced by a single decoration step (``ObjectDecorator.stamp``)
so that the managed-by label set and owner references stay uniform.

Example:
    >>> from rbac_manager.schemas.resources import ObjectDecorator
    >>> decorator = ObjectDecorator(owner_references=())
    >>> meta = decorator.stamp("sa1", namespace="ns1")
    >>> dict(meta.labels)
    {'app.kubernetes.io/managed-by': 'rbac-manager'}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from rbac_manager.schemas.definition import Subject

if TYPE_CHECKING:
    from rbac_manager.schemas.definition import RBACDefinition

RBAC_API_GROUP = "rbac.authorization.k8s.io"
RBAC_API_VERSION = f"{RBAC_API_GROUP}/v1"

# Identifies every object produced by rbac-manager.
MANAGED_LABELS: Mapping[str, str] = MappingProxyType(
    {"app.kubernetes.io/managed-by": "rbac-manager"}
)


class OwnerReference(BaseModel):
    """Controller reference from a produced object back to its RBACDefinition."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    api_version: str = Field(..., description="API version of the owner")
    kind: str = Field(..., description="Kind of the owner")
    name: str = Field(..., description="Name of the owner")
    uid: str = Field(..., description="UID of the owner")
    controller: bool = Field(default=True, description="Owner is the managing controller")
    block_owner_deletion: bool = Field(
        default=True,
        description="Block foreground deletion of the owner until this object is gone",
    )

    def to_k8s(self) -> dict[str, Any]:
        """Convert to the ownerReferences entry of a manifest."""
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "uid": self.uid,
            "controller": self.controller,
            "blockOwnerDeletion": self.block_owner_deletion,
        }


class ObjectMeta(BaseModel):
    """Metadata shared by all produced objects."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Object name")
    namespace: str | None = Field(default=None, description="Namespace, None if cluster scoped")
    labels: Mapping[str, str] = Field(default_factory=dict, description="Kubernetes labels")
    owner_references: tuple[OwnerReference, ...] = Field(
        default=(),
        description="Links to the owning RBACDefinition",
    )

    @field_validator("labels", mode="after")
    @classmethod
    def freeze_labels(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        """Store labels as a read-only view."""
        return MappingProxyType(dict(v))

    @field_serializer("labels")
    def serialize_labels(self, v: Mapping[str, str]) -> dict[str, str]:
        """Serialize the read-only label view as a plain dict."""
        return dict(v)

    def to_k8s(self) -> dict[str, Any]:
        """Convert to a manifest ``metadata`` block."""
        metadata: dict[str, Any] = {"name": self.name}
        if self.namespace is not None:
            metadata["namespace"] = self.namespace
        metadata["labels"] = dict(self.labels)
        if self.owner_references:
            metadata["ownerReferences"] = [ref.to_k8s() for ref in self.owner_references]
        return metadata


class RoleRef(BaseModel):
    """Reference to the Role or ClusterRole granted by a binding.

    A RoleRef always names exactly one role kind.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["Role", "ClusterRole"] = Field(..., description="Referenced role kind")
    name: str = Field(..., min_length=1, description="Referenced role name")
    api_group: str = Field(default=RBAC_API_GROUP, description="RBAC API group")

    def to_k8s(self) -> dict[str, str]:
        """Convert to a manifest ``roleRef`` block."""
        return {"apiGroup": self.api_group, "kind": self.kind, "name": self.name}


class ServiceAccountResource(BaseModel):
    """A ServiceAccount produced for a ServiceAccount subject."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    metadata: ObjectMeta

    @property
    def name(self) -> str:
        """Object name."""
        return self.metadata.name

    @property
    def namespace(self) -> str | None:
        """Object namespace."""
        return self.metadata.namespace

    def to_k8s_manifest(self) -> dict[str, Any]:
        """Convert to K8s ServiceAccount manifest dict."""
        return {
            "apiVersion": "v1",
            "kind": "ServiceAccount",
            "metadata": self.metadata.to_k8s(),
        }


class RoleBindingResource(BaseModel):
    """A namespace-scoped RoleBinding."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    metadata: ObjectMeta
    role_ref: RoleRef
    subjects: tuple[Subject, ...] = Field(..., min_length=1)

    @property
    def name(self) -> str:
        """Object name."""
        return self.metadata.name

    @property
    def namespace(self) -> str | None:
        """Object namespace."""
        return self.metadata.namespace

    def to_k8s_manifest(self) -> dict[str, Any]:
        """Convert to K8s RoleBinding manifest dict."""
        return {
            "apiVersion": RBAC_API_VERSION,
            "kind": "RoleBinding",
            "metadata": self.metadata.to_k8s(),
            "roleRef": self.role_ref.to_k8s(),
            "subjects": [s.to_k8s_subject() for s in self.subjects],
        }


class ClusterRoleBindingResource(BaseModel):
    """A cluster-scoped ClusterRoleBinding."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    metadata: ObjectMeta
    role_ref: RoleRef
    subjects: tuple[Subject, ...] = Field(..., min_length=1)

    @property
    def name(self) -> str:
        """Object name."""
        return self.metadata.name

    def to_k8s_manifest(self) -> dict[str, Any]:
        """Convert to K8s ClusterRoleBinding manifest dict."""
        return {
            "apiVersion": RBAC_API_VERSION,
            "kind": "ClusterRoleBinding",
            "metadata": self.metadata.to_k8s(),
            "roleRef": self.role_ref.to_k8s(),
            "subjects": [s.to_k8s_subject() for s in self.subjects],
        }


def owner_references_for(definition: RBACDefinition) -> tuple[OwnerReference, ...]:
    """Build the owner references linking produced objects to a definition.

    Kubernetes rejects owner references without a UID, so a definition that
    has not been persisted yet (no ``metadata.uid``) owns nothing.

    Args:
        definition: The owning RBACDefinition.

    Returns:
        A one-element tuple with the controller reference, or an empty tuple.
    """
    if not definition.metadata.uid:
        return ()
    return (
        OwnerReference(
            api_version=definition.api_version,
            kind=definition.kind,
            name=definition.name,
            uid=definition.metadata.uid,
        ),
    )


@dataclass(frozen=True)
class ObjectDecorator:
    """Stamps labels and owner references onto every produced object.

    Attributes:
        owner_references: References to the owning definition.
        labels: Identifying label set applied to all objects.
    """

    owner_references: tuple[OwnerReference, ...]
    labels: tuple[tuple[str, str], ...] = tuple(MANAGED_LABELS.items())

    @classmethod
    def for_definition(cls, definition: RBACDefinition) -> ObjectDecorator:
        """Create the decorator for objects owned by ``definition``."""
        return cls(owner_references=owner_references_for(definition))

    def stamp(self, name: str, namespace: str | None = None) -> ObjectMeta:
        """Build decorated metadata for a new object.

        Args:
            name: Object name.
            namespace: Object namespace, None for cluster-scoped objects.

        Returns:
            ObjectMeta carrying the label set and owner references.
        """
        return ObjectMeta(
            name=name,
            namespace=namespace,
            labels=dict(self.labels),
            owner_references=self.owner_references,
        )


__all__ = [
    "RBAC_API_GROUP",
    "RBAC_API_VERSION",
    "MANAGED_LABELS",
    "OwnerReference",
    "ObjectMeta",
    "RoleRef",
    "ServiceAccountResource",
    "RoleBindingResource",
    "ClusterRoleBindingResource",
    "owner_references_for",
    "ObjectDecorator",
]
