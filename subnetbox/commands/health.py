"""
Health command - Check that every node of the local network has bootstrapped.
"""

import asyncio
import sys
from typing import Any

import click
from rich import box
from rich.table import Table

from subnetbox.commands.bootstrap.config import apply_defaults, load_bootstrap_config
from subnetbox.commands.client import NodeClientPool
from subnetbox.commands.cluster import build_endpoints
from subnetbox.commands.constants import EXIT_FAILURE, PRIMARY_CHAINS
from subnetbox.commands.errors import BootstrapError, ConfigurationError
from subnetbox.commands.result import fail, ok
from subnetbox.commands.retry import QUERY_RETRY_CONFIG, retry_async_call
from subnetbox.commands.utils import configure_logging, console


async def check_node_health(
    pool: NodeClientPool, url: str, chains: list[str]
) -> dict[str, Any]:
    """Report whether ``url`` has bootstrapped each of ``chains``."""
    client = pool.client(url)
    try:
        node_id = await retry_async_call(client.get_node_id, config=QUERY_RETRY_CONFIG)
        chain_status = {}
        for chain in chains:
            chain_status[chain] = await retry_async_call(
                client.is_bootstrapped, chain, config=QUERY_RETRY_CONFIG
            )
    except BootstrapError as e:
        return fail(f"{url} unreachable", error=e, endpoint=url)
    return ok(chain_status, endpoint=url, node_id=node_id)


async def check_cluster_health(
    endpoints: list[str], chains: list[str]
) -> list[dict[str, Any]]:
    async with NodeClientPool() as pool:
        return list(
            await asyncio.gather(
                *(check_node_health(pool, url, chains) for url in endpoints)
            )
        )


def create_health_table(results: list[dict[str, Any]], chains: list[str]) -> Table:
    table = Table(title="Node health", box=box.ROUNDED)
    table.add_column("Endpoint", style="yellow")
    table.add_column("Node ID", style="cyan")
    for chain in chains:
        table.add_column(f"{chain}-chain", justify="center")

    for result in results:
        if not result["success"]:
            table.add_row(
                result["endpoint"], "[red]unreachable[/red]", *["-" for _ in chains]
            )
            continue
        cells = [
            "[green]✓[/green]" if result["data"][chain] else "[yellow]…[/yellow]"
            for chain in chains
        ]
        table.add_row(result["endpoint"], result["node_id"], *cells)
    return table


@click.command()
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True),
    help="Bootstrap configuration describing the nodes",
)
@click.option(
    "--chain",
    "chains",
    multiple=True,
    help="Chain alias or id to check (default: P, C and X). Can be given multiple times.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def health(config_file, chains, verbose):
    """Check whether every node has bootstrapped the primary network chains."""
    configure_logging(verbose)
    try:
        config = load_bootstrap_config(config_file) if config_file else apply_defaults({})
        nodes = config["nodes"]
        endpoints = nodes.get("endpoints") or build_endpoints(
            count=nodes["count"],
            host=nodes["host"],
            base_port=nodes["base_port"],
            port_step=nodes["port_step"],
            scheme=nodes["scheme"],
        )
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(EXIT_FAILURE)

    chains = list(chains) or list(PRIMARY_CHAINS)
    results = asyncio.run(check_cluster_health(endpoints, chains))
    console.print(create_health_table(results, chains))

    healthy = all(r["success"] and all(r["data"].values()) for r in results)
    if not healthy:
        console.print("[red]❌ Not every node is bootstrapped[/red]")
        sys.exit(EXIT_FAILURE)
    console.print("[green]✓ All nodes bootstrapped[/green]")
