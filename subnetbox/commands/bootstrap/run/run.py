"""
Bootstrap runner.

This module handles:
- Connecting to the cluster described by the configuration
- Creating the executor and running the workflow
- Turning signals and the workflow deadline into cancellation
- Shaping the outcome into a result dictionary for the CLI
"""

import asyncio
import logging
import signal
from typing import Any, Callable, Optional

from subnetbox.commands.bootstrap.config import apply_defaults
from subnetbox.commands.bootstrap.run.executor import BootstrapExecutor, build_steps
from subnetbox.commands.bootstrap.steps import EndpointRecord
from subnetbox.commands.cancellation import CancelToken
from subnetbox.commands.client import NodeClientPool, UserPass
from subnetbox.commands.cluster import ClusterHandle
from subnetbox.commands.constants import STEP_DISCOVER_NODES
from subnetbox.commands.errors import (
    BootstrapError,
    ConfigurationError,
    SubnetboxError,
)
from subnetbox.commands.result import fail, ok

logger = logging.getLogger(__name__)


async def run_bootstrap(
    token: CancelToken,
    vm_id: str,
    genesis_source: Any,
    config: Optional[dict[str, Any]] = None,
    clock: Optional[Callable[[], float]] = None,
) -> list[EndpointRecord]:
    """
    Bootstrap a subnet and deploy ``vm_id`` on an already running cluster.

    Args:
        token: Cancellation token shared by every step
        vm_id: Id of the VM the new blockchain runs
        genesis_source: Path to the genesis file, or the genesis bytes
        config: Bootstrap configuration; defaults fill anything missing
        clock: Time source for validator windows (defaults to time.time)

    Returns:
        One EndpointRecord per node, in cluster order.

    Raises:
        ConfigurationError: The configuration is unusable.
        BootstrapError: A step failed; ``step_name`` says which one.
    """
    config = apply_defaults(config)
    try:
        steps = build_steps(config, clock=clock)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    keystore = config["keystore"]
    user = UserPass(keystore["username"], keystore["password"])

    async with NodeClientPool() as pool:
        try:
            cluster = await ClusterHandle.from_config(config["nodes"], pool)
        except BootstrapError as e:
            e.set_step(STEP_DISCOVER_NODES)
            raise
        logger.info(
            "Bootstrapping subnet on %d nodes",
            len(cluster),
            extra={"event": "bootstrap_started", "vm_id": vm_id},
        )
        executor = BootstrapExecutor(cluster, pool, steps, user)
        return await executor.execute(token, vm_id, genesis_source)


def _install_signal_handlers(token: CancelToken) -> list[int]:
    """Cancel ``token`` on SIGINT/SIGTERM. Returns the signals handled."""
    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, token.cancel, f"received {sig.name}")
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform or not on the main thread
            continue
        installed.append(sig)
    return installed


def _remove_signal_handlers(signals: list[int]) -> None:
    loop = asyncio.get_running_loop()
    for sig in signals:
        loop.remove_signal_handler(sig)


async def run_bootstrap_workflow(
    config: dict[str, Any],
    clock: Optional[Callable[[], float]] = None,
) -> dict[str, Any]:
    """
    Run the bootstrap described by ``config`` and return a result dictionary.

    The VM id and genesis path are read from the ``vm`` section. A positive
    ``workflow_timeout`` becomes the token's deadline.

    Returns:
        ``ok(records)`` on success, ``fail(...)`` with the error otherwise.
    """
    config = apply_defaults(config)
    vm = config["vm"]
    if not vm.get("vm_id") or not vm.get("genesis"):
        error = ConfigurationError("Both vm.vm_id and vm.genesis must be set")
        return fail(str(error), error=error)

    token = CancelToken(timeout=config.get("workflow_timeout") or None)
    signals = _install_signal_handlers(token)
    try:
        records = await run_bootstrap(
            token, vm["vm_id"], vm["genesis"], config=config, clock=clock
        )
    except SubnetboxError as e:
        return fail(str(e), error=e)
    finally:
        _remove_signal_handlers(signals)

    return ok(
        [record.to_dict() for record in records],
        vm_id=vm["vm_id"],
        blockchain_id=records[0].blockchain_id,
    )


def run_bootstrap_sync(config: dict[str, Any]) -> dict[str, Any]:
    """Synchronous wrapper for run_bootstrap_workflow."""
    return asyncio.run(run_bootstrap_workflow(config))
