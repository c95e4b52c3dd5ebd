"""
SecretSync CLI.

The main Click group is defined here and command groups are registered
from their own modules.

Entry point: secretsync.cli:main
"""

from __future__ import annotations

import click

from .. import __version__
from ._common import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="secretsync")
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr.")
def main(verbose: bool):
    """SecretSync -- encrypted vault to local vault."""
    configure_logging(verbose)


from .secrets_cmd import register_secrets_commands

register_secrets_commands(main)
