"""Configuration models for rbac-manager's Kubernetes access.

Example:
    >>> from rbac_manager.config import KubernetesDirectoryConfig
    >>> config = KubernetesDirectoryConfig()
    >>> config.kubeconfig_path is None
    True
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class KubernetesDirectoryConfig(BaseModel):
    """Connection settings for the Kubernetes-backed namespace directory.

    Client configuration is loaded in this order: explicit kubeconfig path,
    in-cluster service account, default kubeconfig.

    Attributes:
        kubeconfig_path: Path to a kubeconfig file. None tries in-cluster first.
        context: Kubeconfig context to use. None uses the current context.

    Example:
        >>> config = KubernetesDirectoryConfig(
        ...     kubeconfig_path="~/.kube/config",
        ...     context="kind-rbac",
        ... )
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        json_schema_extra={
            "examples": [
                {},
                {"kubeconfig_path": "~/.kube/config", "context": "prod-cluster"},
            ]
        },
    )

    kubeconfig_path: str | None = Field(
        default=None,
        description="Path to kubeconfig file. None uses in-cluster config.",
        examples=["~/.kube/config"],
    )
    context: str | None = Field(
        default=None,
        description="Kubeconfig context to use. None uses current context.",
        examples=["minikube", "prod-cluster"],
    )

    @field_validator("kubeconfig_path")
    @classmethod
    def expand_kubeconfig_path(cls, v: str | None) -> str | None:
        """Expand ``~`` in the kubeconfig path."""
        if v is None:
            return None
        return str(Path(v).expanduser())


__all__ = ["KubernetesDirectoryConfig"]
