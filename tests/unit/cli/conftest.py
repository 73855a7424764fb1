"""Unit test fixtures for the CLI module.

CLI unit tests run without a cluster: selectors are answered from a
``--namespace-labels`` file or a patched namespace directory.
"""

from __future__ import annotations

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner.

    Returns:
        CliRunner instance for testing Click commands.
    """
    return CliRunner()
