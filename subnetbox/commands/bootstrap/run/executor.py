"""
Bootstrap executor - runs the steps in order and reports the outcome.
"""

import logging
from typing import Any, Callable, Optional, Sequence

from subnetbox.commands.bootstrap.steps import (
    AddValidatorsStep,
    BaseStep,
    BootstrapContext,
    CreateBlockchainStep,
    CreateSubnetStep,
    EndpointRecord,
    SetupKeystoreStep,
    WaitForConvergenceStep,
)
from subnetbox.commands.cancellation import CancelToken
from subnetbox.commands.client import NodeClientPool, UserPass
from subnetbox.commands.cluster import ClusterHandle
from subnetbox.commands.errors import BootstrapError, ConsistencyMismatchError
from subnetbox.commands.utils import service_path

logger = logging.getLogger(__name__)

REPORT_STEP = "report"


def build_steps(
    config: dict[str, Any], clock: Optional[Callable[[], float]] = None
) -> list[BaseStep]:
    """Build the ordered step list from a configuration with defaults applied.

    Raises ValueError when a section fails step validation.
    """
    polling = config.get("polling", {})
    interval = polling.get("interval")
    long_interval = polling.get("long_interval")

    def with_interval(section: dict[str, Any]) -> dict[str, Any]:
        step_config = dict(section)
        if interval is not None:
            step_config["poll_interval"] = interval
        return step_config

    blockchain_config = with_interval({})
    vm_name = config.get("vm", {}).get("name")
    if vm_name is not None:
        blockchain_config["name"] = vm_name

    convergence_config = with_interval({"parallel": polling.get("parallel", False)})
    if long_interval is not None:
        convergence_config["long_poll_interval"] = long_interval

    return [
        SetupKeystoreStep(dict(config.get("keystore", {}))),
        CreateSubnetStep(with_interval(config.get("subnet", {}))),
        AddValidatorsStep(with_interval(config.get("validators", {})), clock=clock),
        CreateBlockchainStep(blockchain_config),
        WaitForConvergenceStep(convergence_config),
    ]


class BootstrapExecutor:
    """Drive a running cluster through the bootstrap steps.

    Steps run strictly in order on a single task. The first BootstrapError
    ends the run: it is stamped with the failing step's name and re-raised.
    Nothing is rolled back; tearing the cluster down is the caller's job.
    """

    def __init__(
        self,
        cluster: ClusterHandle,
        pool: NodeClientPool,
        steps: Sequence[BaseStep],
        user: UserPass,
    ):
        self.cluster = cluster
        self.pool = pool
        self.steps = list(steps)
        self.user = user
        self.context: Optional[BootstrapContext] = None

    async def execute(
        self, token: CancelToken, vm_id: str, genesis_source: Any
    ) -> list[EndpointRecord]:
        """Run every step and return one record per node."""
        context = BootstrapContext(
            cluster=self.cluster,
            pool=self.pool,
            token=token,
            user=self.user,
            vm_id=vm_id,
            genesis_source=genesis_source,
        )
        self.context = context

        for index, step in enumerate(self.steps, start=1):
            logger.info(
                "Step %d/%d: %s",
                index,
                len(self.steps),
                step.name,
                extra={"event": "step_started", "step_name": step.name},
            )
            try:
                await step.execute(context)
            except BootstrapError as e:
                e.set_step(step.name)
                logger.error(
                    "Step %s failed: %s",
                    step.name,
                    e,
                    extra={
                        "event": "step_failed",
                        "step_name": step.name,
                        "error_code": e.code,
                        "error_details": e.details,
                    },
                )
                raise

        try:
            return self.report(context)
        except BootstrapError as e:
            e.set_step(REPORT_STEP)
            raise

    def report(self, context: BootstrapContext) -> list[EndpointRecord]:
        """Build and log the per-node endpoint records."""
        pending = [s.node_id for s in context.convergence if not s.converged]
        if pending or len(context.convergence) != len(self.cluster):
            raise ConsistencyMismatchError(
                "Not every node was observed validating and bootstrapped",
                expected=list(self.cluster.list_identities()),
                observed=[s.node_id for s in context.convergence if s.converged],
            )

        records = [
            EndpointRecord(
                node_id=node_id,
                endpoint=endpoint,
                service_path=service_path(endpoint, context.blockchain_id),
                vm_id=context.vm_id,
                blockchain_id=context.blockchain_id,
            )
            for node_id, endpoint in self.cluster.nodes()
        ]
        logger.info("Custom VM endpoints now accessible at:", extra={"event": "report"})
        for record in records:
            logger.info(
                "%s: %s",
                record.node_id,
                record.service_path,
                extra={"event": "endpoint_ready", **record.to_dict()},
            )
        logger.info(
            "Custom VM ID: %s",
            context.vm_id,
            extra={"event": "report", "vm_id": context.vm_id},
        )
        return records
