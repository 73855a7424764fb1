"""Command-line interface for rbac-manager.

Commands:
    rbac-manager resolve: Resolve an RBACDefinition into RBAC manifests
"""

from __future__ import annotations

from rbac_manager.cli.main import cli, main

__all__ = ["cli", "main"]
