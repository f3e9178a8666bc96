"""
Bootstrap command - CLI interface for subnet bootstrap and validation.

This module provides the main bootstrap command with three subcommands:
1. run - Create the subnet, add validators and deploy the VM
2. validate - Validate a bootstrap configuration without touching the cluster
3. create-sample - Create a sample bootstrap configuration file
"""

import sys

import click
from rich import box
from rich.table import Table

from subnetbox.commands.bootstrap.config import (
    apply_defaults,
    create_sample_bootstrap_config,
    load_bootstrap_config,
    merge_cli_overrides,
)
from subnetbox.commands.bootstrap.run import run_bootstrap_sync
from subnetbox.commands.bootstrap.validate import validate_bootstrap_config
from subnetbox.commands.constants import (
    DEFAULT_CONFIG_FILE,
    EXIT_CANCELLED,
    EXIT_FAILURE,
)
from subnetbox.commands.errors import ConfigurationError
from subnetbox.commands.utils import configure_logging, console


def create_endpoint_table(records: list[dict]) -> Table:
    """Create a table listing where each node serves the new chain."""
    table = Table(title="Custom VM endpoints", box=box.ROUNDED)
    table.add_column("Node ID", style="cyan")
    table.add_column("Endpoint", style="yellow")
    table.add_column("Service path", style="green")
    for record in records:
        table.add_row(record["node_id"], record["endpoint"], record["service_path"])
    return table


@click.group()
def bootstrap():
    """
    Bootstrap a subnet and custom VM on a running local network.

    • run: Create the subnet, register validators and deploy the VM
    • validate: Check a bootstrap configuration for errors
    • create-sample: Generate a sample configuration file
    """
    pass


@bootstrap.command()
@click.argument("config_file", type=click.Path(exists=True), required=False)
@click.option("--vm-id", help="ID of the VM to deploy (overrides the config file)")
@click.option(
    "--genesis",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to the VM genesis file (overrides the config file)",
)
@click.option("--vm-name", help="Name of the blockchain to create")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0),
    help="Cancel the run after this many seconds (0 waits until interrupted)",
)
@click.option(
    "--parallel",
    is_flag=True,
    help="Wait for all nodes to converge concurrently instead of one at a time",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def run(config_file, vm_id, genesis, vm_name, timeout, parallel, verbose):
    """
    Bootstrap a subnet and deploy a custom VM onto it.

    This command will:
    1. Create a keystore user and import the funded key
    2. Create the subnet and check its id
    3. Register every node as a subnet validator
    4. Create the blockchain from the genesis file
    5. Wait until every node validates and has bootstrapped the chain

    Without CONFIG_FILE the built-in local network defaults are used and
    --vm-id and --genesis are required.
    """
    configure_logging(verbose)

    try:
        config = load_bootstrap_config(config_file) if config_file else apply_defaults({})
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(EXIT_FAILURE)

    config = merge_cli_overrides(
        config,
        vm_id=vm_id,
        genesis=genesis,
        vm_name=vm_name,
        timeout=timeout,
        parallel=parallel,
    )

    validation_result = validate_bootstrap_config(config)
    if not validation_result["valid"]:
        console.print("\n[bold red]❌ Bootstrap configuration is invalid![/bold red]")
        for error in validation_result["errors"]:
            console.print(f"  [red]• {error}[/red]")
        sys.exit(EXIT_FAILURE)

    result = run_bootstrap_sync(config)

    if result["success"]:
        console.print(create_endpoint_table(result["data"]))
        console.print(f"[green]Custom VM ID: {result['vm_id']}[/green]")
        console.print(f"[green]Blockchain ID: {result['blockchain_id']}[/green]")
        console.print("\n[bold green]🎉 Bootstrap completed successfully![/bold green]")
        return

    step = result.get("step_name") or "setup"
    if result.get("cancelled"):
        console.print(f"\n[bold yellow]⚠️  Bootstrap cancelled during {step}[/bold yellow]")
        sys.exit(EXIT_CANCELLED)

    console.print(f"\n[bold red]❌ Bootstrap failed during {step}![/bold red]")
    console.print(f"[red]{result['error']}[/red]")
    if verbose and result.get("error_details"):
        for key, value in result["error_details"].items():
            console.print(f"  [dim]{key}: {value}[/dim]")
    sys.exit(EXIT_FAILURE)


@bootstrap.command()
@click.argument("config_file", type=click.Path(exists=True), required=True)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def validate(config_file, verbose):
    """
    Validate a bootstrap YAML configuration file.

    The VM id and genesis may be left out of the file since they can be
    supplied on the command line at run time.
    """
    try:
        config = load_bootstrap_config(config_file)
    except ConfigurationError as e:
        console.print(f"[red]Failed to validate config: {e}[/red]")
        sys.exit(EXIT_FAILURE)

    validation_result = validate_bootstrap_config(config, require_vm=False)

    if validation_result["valid"]:
        console.print("\n[bold green]✅ Bootstrap configuration is valid![/bold green]")
        if verbose:
            nodes = config["nodes"]
            console.print("\n[bold]Configuration Summary:[/bold]")
            console.print(f"  Name: {config.get('name')}")
            if config.get("description"):
                console.print(f"  Description: {config['description']}")
            console.print(
                f"  Nodes: {len(nodes['endpoints']) if nodes.get('endpoints') else nodes['count']}"
            )
            console.print(f"  Expected subnet: {config['subnet']['expected_id']}")
            console.print(f"  VM ID: {config['vm'].get('vm_id', 'N/A')}")
    else:
        console.print("\n[bold red]❌ Bootstrap configuration validation failed![/bold red]")
        for error in validation_result["errors"]:
            console.print(f"  [red]• {error}[/red]")
        sys.exit(EXIT_FAILURE)


@bootstrap.command()
@click.option(
    "--output",
    "-o",
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    help="Where to write the sample configuration",
)
def create_sample(output):
    """
    Create a sample bootstrap configuration file.

    The sample lists every option with the local network defaults and can be
    used as a starting point.
    """
    try:
        create_sample_bootstrap_config(output)
    except ConfigurationError:
        sys.exit(EXIT_FAILURE)
