"""
Add validators step - register every cluster node as a subnet validator.
"""

import logging
import time
from typing import Callable, Optional

from subnetbox.commands.bootstrap.steps.base import (
    BaseStep,
    BootstrapContext,
    ValidatorRegistration,
)
from subnetbox.commands.constants import (
    STEP_ADD_VALIDATORS,
    VALIDATOR_END_OFFSET,
    VALIDATOR_START_OFFSET,
    VALIDATOR_WEIGHT,
    WAIT_TIME,
)
from subnetbox.commands.polling import wait_for_tx

logger = logging.getLogger(__name__)


class AddValidatorsStep(BaseStep):
    """Register each node, one transaction at a time, with equal weight.

    Registrations are strictly sequential: all of them spend from the same
    funded address, so the next one is only issued once the previous one has
    committed. Any failure aborts the workflow; a partial validator set is
    never left as a successful outcome.
    """

    name = STEP_ADD_VALIDATORS

    def __init__(self, config=None, clock: Optional[Callable[[], float]] = None):
        super().__init__(config)
        self.clock = clock or time.time

    def _validate_field_types(self) -> None:
        self._validate_integer_field("weight", required=False, positive=True)
        self._validate_integer_field("start_offset", required=False, positive=True)
        self._validate_integer_field("end_offset", required=False, positive=True)
        self._validate_number_field("poll_interval", required=False, positive=True)
        if self.end_offset <= self.start_offset:
            raise ValueError(
                f"Step '{self.name}': 'end_offset' ({self.end_offset}) must be greater "
                f"than 'start_offset' ({self.start_offset})"
            )

    @property
    def weight(self) -> int:
        return self.config.get("weight", VALIDATOR_WEIGHT)

    @property
    def start_offset(self) -> int:
        return self.config.get("start_offset", VALIDATOR_START_OFFSET)

    @property
    def end_offset(self) -> int:
        return self.config.get("end_offset", VALIDATOR_END_OFFSET)

    def validity_window(self) -> tuple[int, int, int]:
        """Return (issue_time, start_time, end_time) as unix seconds."""
        issue_time = int(self.clock())
        return issue_time, issue_time + self.start_offset, issue_time + self.end_offset

    async def execute(self, context: BootstrapContext) -> None:
        client = context.primary_client()
        funded = context.funded_address

        for node_id in context.cluster.list_identities():
            context.token.raise_if_cancelled()
            issue_time, start_time, end_time = self.validity_window()
            tx_id = await client.add_subnet_validator(
                context.user,
                from_addresses=[funded],
                change_address=funded,
                subnet_id=context.subnet_id,
                node_id=node_id,
                weight=self.weight,
                start_time=start_time,
                end_time=end_time,
            )
            await wait_for_tx(
                client,
                tx_id,
                context.token,
                interval=self.config.get("poll_interval", WAIT_TIME),
                description=f"add subnet validator ({node_id}) tx ({tx_id})",
                log_fields={"node_id": node_id, "subnet_id": context.subnet_id},
            )
            context.registrations.append(
                ValidatorRegistration(
                    node_id=node_id,
                    subnet_id=context.subnet_id,
                    weight=self.weight,
                    issue_time=issue_time,
                    start_time=start_time,
                    end_time=end_time,
                    tx_id=tx_id,
                )
            )
