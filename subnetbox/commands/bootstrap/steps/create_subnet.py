"""
Create subnet step - create the subnet and check it is the one the network expects.
"""

import logging
from subnetbox.commands.bootstrap.steps.base import BaseStep, BootstrapContext
from subnetbox.commands.constants import STEP_CREATE_SUBNET, WAIT_TIME
from subnetbox.commands.errors import ConsistencyMismatchError
from subnetbox.commands.polling import wait_for_tx

logger = logging.getLogger(__name__)


class CreateSubnetStep(BaseStep):
    """Create a subnet controlled by the funded address.

    After the creation transaction commits, the subnet listing is compared
    with the listing taken before submission. Exactly one new subnet must
    appear, it must carry ``expected_id`` and it must be controlled by the
    funded address alone with the requested threshold. Nodes only track the
    subnet id they were started with, so any other id means the local network
    and this workflow disagree.
    """

    name = STEP_CREATE_SUBNET

    def _get_required_fields(self) -> list[str]:
        return ["expected_id"]

    def _validate_field_types(self) -> None:
        self._validate_string_field("expected_id")
        self._validate_integer_field("threshold", required=False, positive=True)
        self._validate_number_field("poll_interval", required=False, positive=True)

    @property
    def expected_id(self) -> str:
        return self.config["expected_id"]

    @property
    def threshold(self) -> int:
        return self.config.get("threshold", 1)

    async def execute(self, context: BootstrapContext) -> None:
        client = context.primary_client()
        funded = context.funded_address

        known_ids = {subnet.id for subnet in await client.get_subnets()}

        context.token.raise_if_cancelled()
        tx_id = await client.create_subnet(
            context.user,
            from_addresses=[funded],
            change_address=funded,
            control_keys=[funded],
            threshold=self.threshold,
        )
        logger.info(
            "Submitted subnet creation tx %s",
            tx_id,
            extra={"event": "subnet_tx_submitted", "tx_id": tx_id},
        )
        await wait_for_tx(
            client,
            tx_id,
            context.token,
            interval=self.config.get("poll_interval", WAIT_TIME),
            description=f"subnet creation tx ({tx_id})",
        )

        new_subnets = [s for s in await client.get_subnets() if s.id not in known_ids]
        if len(new_subnets) != 1:
            raise ConsistencyMismatchError(
                f"Expected exactly one new subnet after tx {tx_id} but found {len(new_subnets)}",
                expected=self.expected_id,
                observed=[s.id for s in new_subnets],
            )
        subnet = new_subnets[0]
        subnet_id = subnet.id
        if subnet_id != self.expected_id:
            raise ConsistencyMismatchError(
                f"Expected subnet {self.expected_id} but got {subnet_id}",
                expected=self.expected_id,
                observed=subnet_id,
            )
        if subnet.control_keys != (funded,) or subnet.threshold != self.threshold:
            raise ConsistencyMismatchError(
                f"Subnet {subnet_id} is not controlled by {funded} "
                f"with threshold {self.threshold}",
                expected={"control_keys": [funded], "threshold": self.threshold},
                observed={
                    "control_keys": list(subnet.control_keys),
                    "threshold": subnet.threshold,
                },
            )

        logger.info(
            "Subnet %s created",
            subnet_id,
            extra={"event": "subnet_created", "subnet_id": subnet_id, "tx_id": tx_id},
        )
        context.subnet_id = subnet_id
