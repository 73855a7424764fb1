"""RBACDefinition schemas: the declarative input to resolution.

An RBACDefinition is a custom resource that groups named bindings. Each
binding associates a set of subjects with desired ClusterRoleBindings and
RoleBindings. RoleBindings may target a literal namespace or every namespace
matching a label selector.

Field names follow the custom resource (camelCase aliases) so documents can be
validated directly with ``RBACDefinition.model_validate(document)``.

Example:
    >>> from rbac_manager.schemas.definition import RBACDefinition
    >>> definition = RBACDefinition.model_validate({
    ...     "metadata": {"name": "example"},
    ...     "rbacBindings": [{
    ...         "name": "admin",
    ...         "subjects": [{"kind": "ServiceAccount", "name": "sa1", "namespace": "ns1"}],
    ...         "roleBindings": [{"clusterRole": "view", "namespace": "ns1"}],
    ...     }],
    ... })
    >>> definition.name
    'example'
"""

from __future__ import annotations

from typing import Annotated, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

RBAC_DEFINITION_API_VERSION = "rbacmanager.reactiveops.io/v1beta1"
RBAC_DEFINITION_KIND = "RBACDefinition"

SubjectKind = Literal["ServiceAccount", "User", "Group"]


# =============================================================================
# Subjects
# =============================================================================


class Subject(BaseModel):
    """An identity to be granted access.

    Attributes:
        kind: ServiceAccount, User or Group.
        name: Identity name.
        namespace: Namespace of the identity (required for ServiceAccounts).
        api_group: Optional API group, passed through unchanged.

    Example:
        >>> Subject(kind="User", name="jane@example.com").namespace is None
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    kind: SubjectKind = Field(
        ...,
        description="Subject type",
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Subject name",
    )
    namespace: str | None = Field(
        default=None,
        description="Namespace of the subject (ServiceAccount only)",
    )
    api_group: Annotated[
        str | None,
        Field(
            default=None,
            alias="apiGroup",
            description="API group of the subject",
        ),
    ]

    @model_validator(mode="after")
    def require_service_account_namespace(self) -> Self:
        """Validate that ServiceAccount subjects name their namespace.

        Returns:
            The validated model.

        Raises:
            ValueError: If a ServiceAccount subject has no namespace.
        """
        if self.kind == "ServiceAccount" and not self.namespace:
            msg = f"ServiceAccount subject '{self.name}' requires a namespace"
            raise ValueError(msg)
        return self

    def to_k8s_subject(self) -> dict[str, str]:
        """Convert to the subject entry of a (Cluster)RoleBinding manifest."""
        subject: dict[str, str] = {"kind": self.kind, "name": self.name}
        if self.api_group is not None:
            subject["apiGroup"] = self.api_group
        if self.namespace is not None:
            subject["namespace"] = self.namespace
        return subject


# =============================================================================
# Namespace selectors
# =============================================================================


class LabelSelectorRequirement(BaseModel):
    """A set-based label requirement (matchExpressions entry)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str = Field(..., min_length=1, description="Label key")
    operator: Literal["In", "NotIn", "Exists", "DoesNotExist"] = Field(
        ...,
        description="Set-based operator",
    )
    values: list[str] = Field(
        default_factory=list,
        description="Values for In/NotIn",
    )

    @model_validator(mode="after")
    def validate_values(self) -> Self:
        """Validate that values are present exactly when the operator needs them.

        Returns:
            The validated model.

        Raises:
            ValueError: If In/NotIn has no values or Exists/DoesNotExist has some.
        """
        if self.operator in ("In", "NotIn") and not self.values:
            msg = f"Operator {self.operator} on '{self.key}' requires values"
            raise ValueError(msg)
        if self.operator in ("Exists", "DoesNotExist") and self.values:
            msg = f"Operator {self.operator} on '{self.key}' does not take values"
            raise ValueError(msg)
        return self


class NamespaceSelector(BaseModel):
    """Label query resolved against the live set of namespaces.

    A selector is only considered set when ``match_labels`` or
    ``match_expressions`` is present. An explicitly empty ``matchLabels``
    mapping selects every namespace.

    Attributes:
        match_labels: Equality requirements.
        match_expressions: Set-based requirements.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    match_labels: Annotated[
        dict[str, str] | None,
        Field(
            default=None,
            alias="matchLabels",
            description="Equality-based label requirements",
        ),
    ]
    match_expressions: Annotated[
        list[LabelSelectorRequirement] | None,
        Field(
            default=None,
            alias="matchExpressions",
            description="Set-based label requirements",
        ),
    ]

    @property
    def is_set(self) -> bool:
        """Whether the selector carries any requirement block."""
        return self.match_labels is not None or self.match_expressions is not None


# =============================================================================
# Binding specs
# =============================================================================


class ClusterRoleBindingSpec(BaseModel):
    """A desired ClusterRoleBinding of an existing ClusterRole."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    cluster_role: Annotated[
        str,
        Field(
            min_length=1,
            alias="clusterRole",
            description="Name of the ClusterRole to bind",
        ),
    ]


class RoleBindingSpec(BaseModel):
    """A desired namespace-scoped grant.

    Exactly one of ``role`` / ``cluster_role`` and one of ``namespace`` /
    ``namespace_selector`` are expected. The model accepts any combination so
    that the resolver can report violations with definition and binding
    context.

    Attributes:
        role: Name of a namespaced Role.
        cluster_role: Name of a ClusterRole bound namespace-scoped.
        namespace: Literal target namespace.
        namespace_selector: Label query selecting target namespaces.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    role: str | None = Field(
        default=None,
        description="Name of a namespaced Role",
    )
    cluster_role: Annotated[
        str | None,
        Field(
            default=None,
            alias="clusterRole",
            description="Name of a ClusterRole used as the roleRef",
        ),
    ]
    namespace: str | None = Field(
        default=None,
        description="Literal target namespace",
    )
    namespace_selector: Annotated[
        NamespaceSelector | None,
        Field(
            default=None,
            alias="namespaceSelector",
            description="Label selector for dynamic target namespaces",
        ),
    ]

    @field_validator("role", "cluster_role", "namespace")
    @classmethod
    def empty_as_unset(cls, v: str | None) -> str | None:
        """Treat empty strings as unset, matching the custom resource semantics."""
        return v or None

    @property
    def uses_selector(self) -> bool:
        """Whether namespaces are selected dynamically."""
        return self.namespace_selector is not None and self.namespace_selector.is_set


# =============================================================================
# Bindings and definition
# =============================================================================


class RBACBinding(BaseModel):
    """A named group associating subjects with desired grants.

    Attributes:
        name: Binding name, unique within the definition.
        subjects: Identities receiving the grants. Must be non-empty at
            resolution time.
        cluster_role_bindings: Desired ClusterRoleBindings.
        role_bindings: Desired RoleBindings.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    name: str = Field(
        ...,
        min_length=1,
        description="Binding name",
    )
    subjects: list[Subject] = Field(
        default_factory=list,
        description="Subjects to bind",
    )
    cluster_role_bindings: Annotated[
        list[ClusterRoleBindingSpec],
        Field(
            default_factory=list,
            alias="clusterRoleBindings",
            description="Desired ClusterRoleBindings",
        ),
    ]
    role_bindings: Annotated[
        list[RoleBindingSpec],
        Field(
            default_factory=list,
            alias="roleBindings",
            description="Desired RoleBindings",
        ),
    ]


class DefinitionMetadata(BaseModel):
    """Object metadata of the RBACDefinition custom resource."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(
        ...,
        min_length=1,
        description="Definition name",
    )
    uid: str | None = Field(
        default=None,
        description="Cluster-assigned UID, required for owner references",
    )


class RBACDefinition(BaseModel):
    """Top-level declarative specification of desired access bindings.

    Example:
        >>> definition = RBACDefinition(
        ...     metadata=DefinitionMetadata(name="example", uid="1234"),
        ...     rbac_bindings=[],
        ... )
        >>> definition.kind
        'RBACDefinition'
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "apiVersion": RBAC_DEFINITION_API_VERSION,
                    "kind": RBAC_DEFINITION_KIND,
                    "metadata": {"name": "example"},
                    "rbacBindings": [
                        {
                            "name": "admin",
                            "subjects": [
                                {"kind": "ServiceAccount", "name": "sa1", "namespace": "ns1"}
                            ],
                            "roleBindings": [
                                {
                                    "clusterRole": "view",
                                    "namespaceSelector": {"matchLabels": {"env": "prod"}},
                                }
                            ],
                        }
                    ],
                }
            ]
        },
    )

    api_version: Annotated[
        str,
        Field(
            default=RBAC_DEFINITION_API_VERSION,
            alias="apiVersion",
            description="API version of the custom resource",
        ),
    ]
    kind: Literal["RBACDefinition"] = Field(
        default=RBAC_DEFINITION_KIND,
        description="Resource kind discriminator",
    )
    metadata: DefinitionMetadata = Field(
        ...,
        description="Definition name and UID",
    )
    rbac_bindings: Annotated[
        list[RBACBinding],
        Field(
            default_factory=list,
            alias="rbacBindings",
            description="Ordered list of bindings",
        ),
    ]

    @property
    def name(self) -> str:
        """Definition name."""
        return self.metadata.name

    @model_validator(mode="after")
    def unique_binding_names(self) -> Self:
        """Validate that binding names are unique within the definition.

        Returns:
            The validated model.

        Raises:
            ValueError: If two bindings share a name.
        """
        seen: set[str] = set()
        for binding in self.rbac_bindings:
            if binding.name in seen:
                msg = f"Duplicate binding name '{binding.name}' in '{self.metadata.name}'"
                raise ValueError(msg)
            seen.add(binding.name)
        return self


__all__ = [
    "RBAC_DEFINITION_API_VERSION",
    "RBAC_DEFINITION_KIND",
    "SubjectKind",
    "Subject",
    "LabelSelectorRequirement",
    "NamespaceSelector",
    "ClusterRoleBindingSpec",
    "RoleBindingSpec",
    "RBACBinding",
    "DefinitionMetadata",
    "RBACDefinition",
]
