"""``rbac-manager resolve`` command.

Loads an RBACDefinition, resolves it into ServiceAccounts, RoleBindings and
ClusterRoleBindings, and renders the manifests. Nothing is applied to the
cluster; the cluster is only queried when a RoleBinding selects namespaces by
label and no ``--namespace-labels`` file is given.

Example:
    $ rbac-manager resolve --definition rbac-definition.yaml
    $ rbac-manager resolve -d rbac-definition.yaml --output target/rbac
    $ rbac-manager resolve -d rbac-definition.yaml --namespace-labels namespaces.yaml
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from rbac_manager.cli.utils import ExitCode, error, error_exit, info, success
from rbac_manager.config import KubernetesDirectoryConfig
from rbac_manager.directory import KubernetesNamespaceDirectory, StaticNamespaceDirectory
from rbac_manager.errors import (
    DefinitionLoadError,
    DefinitionValidationError,
    NamespaceLookupError,
)
from rbac_manager.loader import load_definition, load_namespace_labels
from rbac_manager.manifests import render_manifests, validate_all_manifests, write_manifests
from rbac_manager.resolver import RBACDefinitionResolver, has_namespace_selectors
from rbac_manager.telemetry.sanitization import sanitize_error_message

if TYPE_CHECKING:
    from rbac_manager.directory import NamespaceDirectory
    from rbac_manager.schemas.definition import RBACDefinition


def _build_directory(
    definition: RBACDefinition,
    namespace_labels: Path | None,
    kubeconfig: Path | None,
    context: str | None,
) -> NamespaceDirectory | None:
    if namespace_labels is not None:
        return StaticNamespaceDirectory(load_namespace_labels(namespace_labels))
    if not has_namespace_selectors(definition):
        return None
    return KubernetesNamespaceDirectory(
        KubernetesDirectoryConfig(
            kubeconfig_path=str(kubeconfig) if kubeconfig else None,
            context=context,
        )
    )


@click.command(
    name="resolve",
    help="""\b
Resolve an RBACDefinition into Kubernetes RBAC manifests.

Without --output the manifests are printed to stdout as one
multi-document YAML stream. With --output they are written to:
    <output>/serviceaccounts.yaml
    <output>/rolebindings.yaml
    <output>/clusterrolebindings.yaml

Examples:
    $ rbac-manager resolve -d rbac-definition.yaml
    $ rbac-manager resolve -d rbac-definition.yaml -o target/rbac
    $ rbac-manager resolve -d rbac-definition.yaml --namespace-labels ns.yaml
""",
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option(
    "--definition",
    "-d",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True, path_type=Path),
    required=True,
    help="Path to the RBACDefinition YAML file.",
    metavar="PATH",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False, resolve_path=True, path_type=Path),
    default=None,
    help="Directory to write manifests to (default: stdout).",
    metavar="PATH",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Resolve and validate without printing or writing manifests.",
)
@click.option(
    "--namespace-labels",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True, path_type=Path),
    default=None,
    help="YAML mapping of namespace to labels, used instead of the cluster.",
    metavar="PATH",
)
@click.option(
    "--kubeconfig",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to kubeconfig (default: in-cluster, then ~/.kube/config).",
    metavar="PATH",
)
@click.option(
    "--context",
    type=str,
    default=None,
    help="Kubeconfig context to use.",
)
def resolve_command(
    definition: Path,
    output: Path | None,
    dry_run: bool,
    namespace_labels: Path | None,
    kubeconfig: Path | None,
    context: str | None,
) -> None:
    """Resolve an RBACDefinition and render its manifests."""
    try:
        rbac_definition = load_definition(definition)
        directory = _build_directory(rbac_definition, namespace_labels, kubeconfig, context)
        result = RBACDefinitionResolver(directory=directory).resolve(rbac_definition)
    except (DefinitionLoadError, DefinitionValidationError) as e:
        error_exit(sanitize_error_message(e.message), exit_code=ExitCode.VALIDATION_ERROR)
    except NamespaceLookupError as e:
        error_exit(sanitize_error_message(e.message), exit_code=ExitCode.NETWORK_ERROR)
    except FileNotFoundError as e:
        error_exit("File not found", exit_code=ExitCode.FILE_NOT_FOUND, path=e.filename)

    manifests = result.to_manifests()
    is_valid, validation_errors = validate_all_manifests(manifests)
    if not is_valid:
        for message in validation_errors:
            error(message)
        error_exit("Resolved manifests are invalid", exit_code=ExitCode.VALIDATION_ERROR)

    info(str(result))

    if dry_run:
        success("Dry-run complete: no manifests written.")
        return

    if output is None:
        click.echo(render_manifests(result), nl=False)
        return

    for path in write_manifests(manifests, output):
        info(f"  {path}")
    success(f"Wrote {result.total} objects to {output}")


__all__: list[str] = ["resolve_command"]
