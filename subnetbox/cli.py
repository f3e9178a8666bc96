#!/usr/bin/env python3
"""
Subnetbox CLI
Bootstrap a subnet and custom VM on a local multi-node test network.
"""

import click

from subnetbox import __version__
from subnetbox.commands import bootstrap, health


@click.group()
@click.version_option(version=__version__)
def cli():
    """Subnetbox CLI - Deploy a custom VM onto a local test network subnet."""
    pass


cli.add_command(bootstrap)
cli.add_command(health)


def main():
    """Main entry point for the subnetbox CLI."""
    cli()


if __name__ == "__main__":
    main()
