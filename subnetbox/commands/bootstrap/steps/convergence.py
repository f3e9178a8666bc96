"""
Wait for convergence step - every node validates and has bootstrapped the chain.
"""

import asyncio
import logging

from subnetbox.commands.bootstrap.steps.base import (
    BaseStep,
    BootstrapContext,
    NodeConvergence,
)
from subnetbox.commands.constants import LONG_WAIT_TIME, STEP_WAIT_CONVERGENCE, WAIT_TIME
from subnetbox.commands.polling import (
    bootstrapped_accessor,
    validating_accessor,
    wait_until_terminal,
)

logger = logging.getLogger(__name__)


class WaitForConvergenceStep(BaseStep):
    """Poll every node until it reports the chain as validating, then bootstrapped.

    Nodes are checked one after another by default. With ``parallel: true``
    each node gets its own task; the first failure cancels the others and all
    of them observe the shared cancellation token.
    """

    name = STEP_WAIT_CONVERGENCE

    def _validate_field_types(self) -> None:
        self._validate_number_field("poll_interval", required=False, positive=True)
        self._validate_number_field("long_poll_interval", required=False, positive=True)
        self._validate_boolean_field("parallel")

    async def execute(self, context: BootstrapContext) -> None:
        context.convergence = [
            NodeConvergence(node_id=node_id, endpoint=endpoint)
            for node_id, endpoint in context.cluster.nodes()
        ]
        if self.config.get("parallel", False):
            await self._converge_parallel(context)
        else:
            for state in context.convergence:
                await self._converge_node(context, state)

    async def _converge_node(
        self, context: BootstrapContext, state: NodeConvergence
    ) -> None:
        client = context.pool.client(state.endpoint)
        chain_id = context.blockchain_id
        fields = {
            "node_id": state.node_id,
            "endpoint": state.endpoint,
            "blockchain_id": chain_id,
        }

        await wait_until_terminal(
            validating_accessor(client, chain_id),
            context.token,
            interval=self.config.get("long_poll_interval", LONG_WAIT_TIME),
            description=f"validating status for {state.node_id}",
            log_fields=fields,
        )
        state.validating = True
        logger.info(
            "%s validating blockchain %s",
            state.node_id,
            chain_id,
            extra={"event": "node_validating", **fields},
        )

        await wait_until_terminal(
            bootstrapped_accessor(client, chain_id),
            context.token,
            interval=self.config.get("poll_interval", WAIT_TIME),
            description=f"{state.node_id} to bootstrap {chain_id}",
            log_fields=fields,
        )
        state.bootstrapped = True
        logger.info(
            "%s bootstrapped %s",
            state.node_id,
            chain_id,
            extra={"event": "node_bootstrapped", **fields},
        )

    async def _converge_parallel(self, context: BootstrapContext) -> None:
        tasks = [
            asyncio.create_task(self._converge_node(context, state))
            for state in context.convergence
        ]
        try:
            done, pending = await asyncio.wait(
                tasks, return_when=asyncio.FIRST_EXCEPTION
            )
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            # Wait for cancellations to complete
            await asyncio.gather(*tasks, return_exceptions=True)

        # Re-raise the failure of the first node, in cluster order
        for task in tasks:
            if task.done() and not task.cancelled() and task.exception():
                raise task.exception()
