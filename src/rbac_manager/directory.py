"""Namespace directory: resolves label selectors to namespace names.

The resolver only talks to the directory when a RoleBinding spec selects its
namespaces by label. Two implementations are provided:

- ``KubernetesNamespaceDirectory`` queries a live cluster through the official
  kubernetes client.
- ``StaticNamespaceDirectory`` evaluates selectors against an in-memory
  namespace → labels map (offline rendering and tests).

Example:
    >>> from rbac_manager.directory import StaticNamespaceDirectory
    >>> from rbac_manager.schemas.definition import NamespaceSelector
    >>> directory = StaticNamespaceDirectory({"ns1": {"env": "prod"}, "ns2": {}})
    >>> directory.list_namespaces(NamespaceSelector(match_labels={"env": "prod"}))
    ['ns1']
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import structlog

from rbac_manager.config import KubernetesDirectoryConfig
from rbac_manager.errors import NamespaceLookupError
from rbac_manager.telemetry.sanitization import sanitize_k8s_api_error

if TYPE_CHECKING:
    from rbac_manager.schemas.definition import LabelSelectorRequirement, NamespaceSelector

logger = structlog.get_logger(__name__)


@runtime_checkable
class NamespaceDirectory(Protocol):
    """Lookup of namespaces by label selector."""

    def list_namespaces(self, selector: NamespaceSelector) -> list[str]:
        """Return the names of namespaces matching ``selector``, in order.

        Raises:
            NamespaceLookupError: If the lookup fails.
        """
        ...


def _format_requirement(requirement: LabelSelectorRequirement) -> str:
    if requirement.operator == "Exists":
        return requirement.key
    if requirement.operator == "DoesNotExist":
        return f"!{requirement.key}"
    op = "in" if requirement.operator == "In" else "notin"
    return f"{requirement.key} {op} ({','.join(sorted(requirement.values))})"


def format_label_selector(selector: NamespaceSelector) -> str:
    """Render a selector in Kubernetes label selector syntax.

    Keys are sorted so the same selector always renders the same string.

    Args:
        selector: The namespace selector.

    Returns:
        Selector string, empty when the selector matches everything.

    Example:
        >>> from rbac_manager.schemas.definition import NamespaceSelector
        >>> format_label_selector(NamespaceSelector(match_labels={"team": "a", "env": "prod"}))
        'env=prod,team=a'
    """
    parts = [f"{key}={value}" for key, value in sorted((selector.match_labels or {}).items())]
    parts.extend(
        _format_requirement(req)
        for req in sorted(selector.match_expressions or [], key=lambda r: (r.key, r.operator))
    )
    return ",".join(parts)


def selector_matches(selector: NamespaceSelector, labels: Mapping[str, str]) -> bool:
    """Evaluate ``selector`` against a label set.

    Args:
        selector: The namespace selector.
        labels: Labels of a namespace.

    Returns:
        True if every requirement of the selector holds.
    """
    for key, value in (selector.match_labels or {}).items():
        if labels.get(key) != value:
            return False
    for req in selector.match_expressions or []:
        present = req.key in labels
        if req.operator == "Exists" and not present:
            return False
        if req.operator == "DoesNotExist" and present:
            return False
        if req.operator == "In" and (not present or labels[req.key] not in req.values):
            return False
        if req.operator == "NotIn" and present and labels[req.key] in req.values:
            return False
    return True


class StaticNamespaceDirectory:
    """Namespace directory backed by a fixed namespace → labels map.

    Namespaces are returned in the insertion order of the mapping.

    Attributes:
        namespaces: Mapping of namespace name to its labels.
    """

    def __init__(self, namespaces: Mapping[str, Mapping[str, str]]) -> None:
        """Initialize the directory.

        Args:
            namespaces: Mapping of namespace name to its labels.
        """
        self.namespaces: dict[str, dict[str, str]] = {
            name: dict(labels) for name, labels in namespaces.items()
        }

    def list_namespaces(self, selector: NamespaceSelector) -> list[str]:
        """Return namespaces whose labels satisfy ``selector``."""
        return [
            name for name, labels in self.namespaces.items() if selector_matches(selector, labels)
        ]


class KubernetesNamespaceDirectory:
    """Namespace directory querying the Kubernetes API.

    The kubernetes client is imported and configured on first use, so
    constructing the directory never touches the cluster.

    Attributes:
        config: Connection settings.

    Example:
        >>> directory = KubernetesNamespaceDirectory(KubernetesDirectoryConfig())
        >>> directory.list_namespaces(selector)  # doctest: +SKIP
        ['team-a-prod', 'team-b-prod']
    """

    def __init__(
        self,
        config: KubernetesDirectoryConfig | None = None,
        *,
        core_api: Any = None,
    ) -> None:
        """Initialize the directory.

        Args:
            config: Connection settings. Uses defaults if None.
            core_api: Pre-built ``CoreV1Api`` instance. Skips client loading
                when given.
        """
        self.config = config or KubernetesDirectoryConfig()
        self._api: Any = core_api

    def _core_api(self) -> Any:
        if self._api is not None:
            return self._api

        try:
            from kubernetes import client
            from kubernetes import config as k8s_config

            if self.config.kubeconfig_path:
                k8s_config.load_kube_config(
                    config_file=self.config.kubeconfig_path,
                    context=self.config.context,
                )
                logger.debug(
                    "namespace_directory.kubeconfig_loaded",
                    kubeconfig_path=self.config.kubeconfig_path,
                    context=self.config.context,
                )
            else:
                try:
                    k8s_config.load_incluster_config()
                    logger.debug("namespace_directory.incluster_config_loaded")
                except k8s_config.ConfigException:
                    k8s_config.load_kube_config(context=self.config.context)
                    logger.debug(
                        "namespace_directory.default_kubeconfig_loaded",
                        context=self.config.context,
                    )
        except Exception as e:
            logger.error("namespace_directory.client_init_failed", error_type=type(e).__name__)
            raise NamespaceLookupError(
                reason=f"Failed to load Kubernetes configuration: {type(e).__name__}"
            ) from e

        self._api = client.CoreV1Api()
        return self._api

    def list_namespaces(self, selector: NamespaceSelector) -> list[str]:
        """List namespaces matching ``selector`` on the cluster.

        Args:
            selector: The namespace selector.

        Returns:
            Namespace names in the order returned by the API server.

        Raises:
            NamespaceLookupError: On configuration, transport or
                authorization failure.
        """
        label_selector = format_label_selector(selector)
        api = self._core_api()

        try:
            namespaces = api.list_namespace(label_selector=label_selector)
        except Exception as e:
            reason = sanitize_k8s_api_error(e)
            logger.error(
                "namespace_directory.list_failed",
                label_selector=label_selector,
                reason=reason,
            )
            raise NamespaceLookupError(selector=label_selector, reason=reason) from e

        names = [ns.metadata.name for ns in namespaces.items]
        logger.debug(
            "namespace_directory.listed",
            label_selector=label_selector,
            count=len(names),
        )
        return names


__all__ = [
    "NamespaceDirectory",
    "StaticNamespaceDirectory",
    "KubernetesNamespaceDirectory",
    "format_label_selector",
    "selector_matches",
]
