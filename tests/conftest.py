"""Shared pytest fixtures for rbac-manager tests.

Unit tests run without a cluster: namespace selectors are answered by a
StaticNamespaceDirectory or a MagicMock standing in for ``CoreV1Api``.

NOTE: Do NOT add __init__.py to test directories - pytest uses importlib mode
which can cause namespace collisions with __init__.py files.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest
import structlog

if TYPE_CHECKING:
    from collections.abc import Generator

    from rbac_manager.directory import StaticNamespaceDirectory
    from rbac_manager.result import ResolutionEvent
    from rbac_manager.schemas.definition import RBACDefinition


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "requirement(id): Mark test as covering a specific requirement",
    )


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Restore structlog and root logger state after each test.

    The CLI reconfigures both on every invocation; without this, a test
    could inherit handlers bound to a closed CliRunner stream.
    """
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def make_definition() -> Callable[..., RBACDefinition]:
    """Factory building an RBACDefinition from camelCase bindings.

    Returns:
        Callable taking the binding dicts plus optional ``name``/``uid``.

    Example:
        >>> definition = make_definition(
        ...     [{"name": "admin", "subjects": [...]}], name="example"
        ... )
    """
    from rbac_manager.schemas.definition import RBACDefinition

    def _make(
        bindings: list[dict[str, Any]],
        *,
        name: str = "example",
        uid: str | None = None,
    ) -> RBACDefinition:
        metadata: dict[str, Any] = {"name": name}
        if uid is not None:
            metadata["uid"] = uid
        return RBACDefinition.model_validate({"metadata": metadata, "rbacBindings": bindings})

    return _make


@pytest.fixture
def sa_subject() -> dict[str, str]:
    """ServiceAccount subject ``ns1/sa1``."""
    return {"kind": "ServiceAccount", "name": "sa1", "namespace": "ns1"}


@pytest.fixture
def namespace_directory() -> StaticNamespaceDirectory:
    """Static directory with two prod namespaces and one dev namespace.

    Returns:
        Directory where ``env=prod`` matches ns1 and ns2, in that order.
    """
    from rbac_manager.directory import StaticNamespaceDirectory

    return StaticNamespaceDirectory(
        {
            "ns1": {"env": "prod", "team": "a"},
            "ns2": {"env": "prod", "team": "b"},
            "dev": {"env": "dev", "team": "a"},
        }
    )


@pytest.fixture
def event_recorder() -> tuple[list[ResolutionEvent], Callable[[ResolutionEvent], None]]:
    """Event sink collecting resolution events into a list.

    Returns:
        Tuple of (recorded events, sink callable).
    """
    events: list[ResolutionEvent] = []
    return events, events.append


@pytest.fixture
def definition_yaml(tmp_path: Path) -> Path:
    """Write the single-binding example definition to a temp file.

    Returns:
        Path to ``rbac-definition.yaml``.
    """
    path = tmp_path / "rbac-definition.yaml"
    path.write_text(
        """\
apiVersion: rbacmanager.reactiveops.io/v1beta1
kind: RBACDefinition
metadata:
  name: example
  uid: 6c3b1d2e-0000-4000-8000-000000000001
rbacBindings:
  - name: admin
    subjects:
      - kind: ServiceAccount
        name: sa1
        namespace: ns1
    roleBindings:
      - clusterRole: view
        namespace: ns1
"""
    )
    return path


@pytest.fixture
def selector_definition_yaml(tmp_path: Path) -> Path:
    """Write a definition whose RoleBinding selects namespaces by label.

    Returns:
        Path to ``selector-definition.yaml``.
    """
    path = tmp_path / "selector-definition.yaml"
    path.write_text(
        """\
apiVersion: rbacmanager.reactiveops.io/v1beta1
kind: RBACDefinition
metadata:
  name: example
rbacBindings:
  - name: admin
    subjects:
      - kind: ServiceAccount
        name: sa1
        namespace: ns1
    roleBindings:
      - clusterRole: view
        namespaceSelector:
          matchLabels:
            env: prod
"""
    )
    return path


@pytest.fixture
def namespace_labels_yaml(tmp_path: Path) -> Path:
    """Write a namespace → labels file with ns1/ns2 labelled ``env=prod``.

    Returns:
        Path to ``namespaces.yaml``.
    """
    path = tmp_path / "namespaces.yaml"
    path.write_text(
        """\
ns1:
  env: prod
ns2:
  env: prod
dev:
  env: dev
"""
    )
    return path
