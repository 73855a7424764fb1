"""Validation, rendering and writing of resolved RBAC manifests.

The applier that consumes these manifests is outside rbac-manager; this module
only turns a ResolutionResult into YAML documents that pass
``kubectl apply --dry-run=client``.

Example:
    >>> from rbac_manager.manifests import render_manifests
    >>> print(render_manifests(result))  # doctest: +SKIP
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from rbac_manager.result import MANIFEST_FILES

if TYPE_CHECKING:
    from rbac_manager.result import ResolutionResult

REQUIRED_MANIFEST_FIELDS: tuple[str, ...] = ("apiVersion", "kind", "metadata")

# Kinds rbac-manager produces.
VALID_KINDS: frozenset[str] = frozenset(
    {"ServiceAccount", "RoleBinding", "ClusterRoleBinding"}
)

NAMESPACED_KINDS: frozenset[str] = frozenset({"ServiceAccount", "RoleBinding"})


def validate_manifest(manifest: dict[str, Any]) -> list[str]:
    """Validate a single manifest for the fields Kubernetes requires.

    Args:
        manifest: Dictionary representing a K8s manifest.

    Returns:
        List of validation error messages. Empty if valid.

    Example:
        >>> errors = validate_manifest({"kind": "ServiceAccount"})
        >>> "Missing required field: apiVersion" in errors
        True
    """
    errors: list[str] = []

    for required_field in REQUIRED_MANIFEST_FIELDS:
        if required_field not in manifest:
            errors.append(f"Missing required field: {required_field}")

    kind = manifest.get("kind")
    if kind and kind not in VALID_KINDS:
        errors.append(f"Unknown kind: {kind}. Expected one of: {sorted(VALID_KINDS)}")

    metadata = manifest.get("metadata", {})
    if "metadata" in manifest and not isinstance(metadata, dict):
        errors.append("metadata must be a dictionary")
        return errors

    if "name" not in metadata:
        errors.append("metadata.name is required")
    if kind in NAMESPACED_KINDS and not metadata.get("namespace"):
        errors.append(f"metadata.namespace is required for {kind}")
    if kind == "ClusterRoleBinding" and "namespace" in metadata:
        errors.append("ClusterRoleBinding must not set metadata.namespace")

    if kind in ("RoleBinding", "ClusterRoleBinding"):
        if not manifest.get("roleRef"):
            errors.append(f"roleRef is required for {kind}")
        if not manifest.get("subjects"):
            errors.append(f"subjects must be non-empty for {kind}")

    return errors


def validate_all_manifests(
    manifests: dict[str, list[dict[str, Any]]],
) -> tuple[bool, list[str]]:
    """Validate every manifest of every file.

    Args:
        manifests: Mapping of file names to manifest dicts.

    Returns:
        Tuple of (is_valid, error_messages), with ``file[index]`` context in
        each message.
    """
    all_errors: list[str] = []

    for filename, docs in manifests.items():
        for i, doc in enumerate(docs):
            for error in validate_manifest(doc):
                all_errors.append(f"{filename}[{i}]: {error}")

    return len(all_errors) == 0, all_errors


def _dump(docs: list[dict[str, Any]]) -> str:
    # safe_dump_all refuses arbitrary Python objects.
    return yaml.safe_dump_all(
        docs,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
    )


def render_manifests(result: ResolutionResult) -> str:
    """Render all objects of ``result`` as one multi-document YAML stream.

    Documents follow MANIFEST_FILES order: ServiceAccounts, then
    RoleBindings, then ClusterRoleBindings.

    Args:
        result: A successful resolution.

    Returns:
        YAML text, empty if nothing was produced.
    """
    manifests = result.to_manifests()
    docs = [doc for filename in MANIFEST_FILES for doc in manifests[filename]]
    if not docs:
        return ""
    return _dump(docs)


def write_manifests(
    manifests: dict[str, list[dict[str, Any]]],
    output_dir: Path,
) -> list[Path]:
    """Write manifests to ``output_dir``, one file per resource type.

    Every file is written, even when empty, so that stale objects from a
    previous run are not left behind in the directory.

    Args:
        manifests: Mapping of file names to manifest dicts.
        output_dir: Directory to write into, created if missing.

    Returns:
        Paths of the written files.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    generated_paths: list[Path] = []

    for filename, docs in manifests.items():
        file_path = output_dir / filename
        file_path.write_text(_dump(docs) if docs else "")
        generated_paths.append(file_path)

    return generated_paths


__all__ = [
    "REQUIRED_MANIFEST_FIELDS",
    "VALID_KINDS",
    "validate_manifest",
    "validate_all_manifests",
    "render_manifests",
    "write_manifests",
]
