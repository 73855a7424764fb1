"""Loading RBACDefinition documents from YAML.

Example:
    >>> from rbac_manager.loader import load_definition
    >>> definition = load_definition(Path("rbac-definition.yaml"))  # doctest: +SKIP
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from rbac_manager.errors import DefinitionLoadError
from rbac_manager.schemas.definition import RBACDefinition

logger = structlog.get_logger(__name__)


def _format_validation_error(error: ValidationError) -> str:
    details = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"]) or "<root>"
        details.append(f"{location}: {err['msg']}")
    return "; ".join(details)


def parse_definition(document: Any, *, source: str = "") -> RBACDefinition:
    """Validate a parsed RBACDefinition document.

    Args:
        document: Mapping with the custom resource's fields.
        source: Description of the document for error messages.

    Returns:
        The validated RBACDefinition.

    Raises:
        DefinitionLoadError: If the document is not a mapping or does not
            match the schema.
    """
    if not isinstance(document, dict):
        msg = f"Expected a mapping, got {type(document).__name__}"
        raise DefinitionLoadError(msg, source=source)

    try:
        return RBACDefinition.model_validate(document)
    except ValidationError as e:
        raise DefinitionLoadError(
            f"Invalid RBACDefinition: {_format_validation_error(e)}",
            source=source,
        ) from e


def load_definition(path: Path) -> RBACDefinition:
    """Read and validate a single-document RBACDefinition YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        The validated RBACDefinition.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        DefinitionLoadError: If the file is not valid YAML or not a valid
            RBACDefinition.
    """
    text = path.read_text()
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DefinitionLoadError(f"Invalid YAML: {e}", source=str(path)) from e

    definition = parse_definition(document, source=str(path))
    logger.debug(
        "loader.definition_loaded",
        path=str(path),
        definition=definition.name,
        bindings=len(definition.rbac_bindings),
    )
    return definition


def load_namespace_labels(path: Path) -> dict[str, dict[str, str]]:
    """Read a namespace → labels mapping for offline selector resolution.

    The file is a YAML mapping of namespace names to label mappings, e.g.
    ``{"team-a": {"env": "prod"}, "team-b": {}}``.

    Args:
        path: Path to the YAML file.

    Returns:
        Mapping of namespace name to its labels, in file order.

    Raises:
        DefinitionLoadError: If the file does not have that shape.
    """
    try:
        document = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise DefinitionLoadError(f"Invalid YAML: {e}", source=str(path)) from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise DefinitionLoadError("Expected a mapping of namespace to labels", source=str(path))

    namespaces: dict[str, dict[str, str]] = {}
    for name, labels in document.items():
        labels = labels or {}
        if not isinstance(labels, dict):
            raise DefinitionLoadError(
                f"Labels of namespace '{name}' must be a mapping", source=str(path)
            )
        namespaces[str(name)] = {str(k): str(v) for k, v in labels.items()}
    return namespaces


__all__ = ["parse_definition", "load_definition", "load_namespace_labels"]
