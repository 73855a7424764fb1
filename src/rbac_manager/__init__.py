"""rbac-manager: resolve declarative RBACDefinitions into Kubernetes RBAC objects.

This package provides:
- RBACDefinition: Pydantic schema of the custom resource
- RBACDefinitionResolver, resolve_definition: Binding resolution
- ResolutionResult: ServiceAccounts, RoleBindings and ClusterRoleBindings produced
- NamespaceDirectory: Label selector lookup (Kubernetes or static)
- Errors: DefinitionValidationError, NamespaceLookupError, DefinitionLoadError

Example:
    >>> from rbac_manager import load_definition, resolve_definition
    >>> definition = load_definition(Path("rbac-definition.yaml"))
    >>> result = resolve_definition(definition)
    >>> print(result)
    RBACDefinition example:
      ServiceAccounts: 1
      RoleBindings: 1
      ClusterRoleBindings: 0

See Also:
    - rbac_manager.schemas: Input and output schemas
    - rbac_manager.manifests: Rendering and writing manifests
    - rbac_manager.cli: The ``rbac-manager`` command
"""

from __future__ import annotations

__version__ = "0.1.0"

from rbac_manager import schemas as schemas  # noqa: PLC0414
from rbac_manager import telemetry as telemetry  # noqa: PLC0414
from rbac_manager.directory import (
    KubernetesNamespaceDirectory,
    NamespaceDirectory,
    StaticNamespaceDirectory,
)
from rbac_manager.errors import (
    DefinitionLoadError,
    DefinitionValidationError,
    NamespaceLookupError,
    RBACManagerError,
)
from rbac_manager.loader import load_definition, parse_definition
from rbac_manager.resolver import RBACDefinitionResolver, resolve_definition
from rbac_manager.result import ResolutionEvent, ResolutionResult
from rbac_manager.schemas import RBACDefinition

__all__ = [
    "__version__",
    "schemas",
    "telemetry",
    # Resolution
    "RBACDefinition",
    "RBACDefinitionResolver",
    "resolve_definition",
    "ResolutionEvent",
    "ResolutionResult",
    # Loading
    "load_definition",
    "parse_definition",
    # Namespace directory
    "NamespaceDirectory",
    "KubernetesNamespaceDirectory",
    "StaticNamespaceDirectory",
    # Errors
    "RBACManagerError",
    "DefinitionValidationError",
    "NamespaceLookupError",
    "DefinitionLoadError",
]
