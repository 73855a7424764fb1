"""Pydantic schemas for RBAC definitions and the resources they produce.

Example:
    >>> from rbac_manager.schemas import RBACDefinition, RoleBindingResource
"""

from __future__ import annotations

from rbac_manager.schemas.definition import (
    RBAC_DEFINITION_API_VERSION,
    RBAC_DEFINITION_KIND,
    ClusterRoleBindingSpec,
    DefinitionMetadata,
    LabelSelectorRequirement,
    NamespaceSelector,
    RBACBinding,
    RBACDefinition,
    RoleBindingSpec,
    Subject,
)
from rbac_manager.schemas.resources import (
    MANAGED_LABELS,
    ClusterRoleBindingResource,
    ObjectDecorator,
    ObjectMeta,
    OwnerReference,
    RoleBindingResource,
    RoleRef,
    ServiceAccountResource,
)

__all__ = [
    # Input
    "RBAC_DEFINITION_API_VERSION",
    "RBAC_DEFINITION_KIND",
    "ClusterRoleBindingSpec",
    "DefinitionMetadata",
    "LabelSelectorRequirement",
    "NamespaceSelector",
    "RBACBinding",
    "RBACDefinition",
    "RoleBindingSpec",
    "Subject",
    # Output
    "MANAGED_LABELS",
    "ClusterRoleBindingResource",
    "ObjectDecorator",
    "ObjectMeta",
    "OwnerReference",
    "RoleBindingResource",
    "RoleRef",
    "ServiceAccountResource",
]
