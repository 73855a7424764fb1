"""Entry point for the rbac-manager CLI.

Example:
    $ rbac-manager --help
    $ rbac-manager --log-level DEBUG resolve --definition rbac-definition.yaml
"""

from __future__ import annotations

import sys
from importlib.metadata import version as get_version

import click

from rbac_manager.cli.resolve import resolve_command
from rbac_manager.telemetry.logging import configure_logging
from rbac_manager.telemetry.sanitization import sanitize_error_message


def _get_version() -> str:
    """Return the installed rbac-manager version, or 'unknown'."""
    try:
        return get_version("rbac-manager")
    except Exception:
        return "unknown"


@click.group(
    name="rbac-manager",
    help="rbac-manager - resolve RBACDefinitions into Kubernetes RBAC objects.",
    epilog="Use 'rbac-manager <command> --help' for command-specific help.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(
    version=_get_version(),
    prog_name="rbac-manager",
    message="%(prog)s %(version)s",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Minimum level of log output (stderr).",
)
@click.option(
    "--json-logs/--console-logs",
    default=False,
    help="Emit logs as JSON lines instead of console format.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str, json_logs: bool) -> None:
    """Root command group for the rbac-manager CLI."""
    ctx.ensure_object(dict)
    configure_logging(log_level=log_level, json_output=json_logs)


cli.add_command(resolve_command)


def main(argv: list[str] | None = None) -> None:
    """Run the CLI.

    Args:
        argv: Command-line arguments (uses sys.argv if None).
    """
    try:
        cli(args=argv, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: {sanitize_error_message(str(e))}", err=True)
        sys.exit(1)


__all__ = ["cli", "main"]
