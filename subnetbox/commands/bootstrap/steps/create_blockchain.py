"""
Create blockchain step - deploy the custom VM onto the subnet.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

from subnetbox.commands.bootstrap.steps.base import BaseStep, BootstrapContext
from subnetbox.commands.client import Blockchain
from subnetbox.commands.constants import (
    DEFAULT_VM_NAME,
    ERROR_FILE_NOT_FOUND,
    STEP_CREATE_BLOCKCHAIN,
    WAIT_TIME,
)
from subnetbox.commands.errors import ConsistencyMismatchError, GenesisReadError
from subnetbox.commands.polling import wait_for_tx

logger = logging.getLogger(__name__)


def read_genesis(source: Any) -> bytes:
    """Load the genesis payload.

    ``source`` is either the payload itself (bytes) or a path to a file
    holding it.
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if not isinstance(source, (str, os.PathLike)) or not str(source):
        raise GenesisReadError(f"Unsupported genesis source: {source!r}")
    path = Path(source)
    try:
        return path.read_bytes()
    except FileNotFoundError as e:
        raise GenesisReadError(
            ERROR_FILE_NOT_FOUND.format(path=path), source=str(path)
        ) from e
    except OSError as e:
        raise GenesisReadError(
            f"Could not read genesis file ({path}): {e}", source=str(path)
        ) from e


def find_blockchain(
    blockchains: list[Blockchain], subnet_id: str, vm_id: str
) -> Optional[Blockchain]:
    """Pick the chain running on ``subnet_id``, preferring one that runs ``vm_id``."""
    on_subnet = [chain for chain in blockchains if chain.subnet_id == subnet_id]
    for chain in on_subnet:
        if chain.vm_id == vm_id:
            return chain
    return on_subnet[0] if on_subnet else None


class CreateBlockchainStep(BaseStep):
    """Create the blockchain and discover the chain id the cluster assigned it."""

    name = STEP_CREATE_BLOCKCHAIN

    def _validate_field_types(self) -> None:
        self._validate_string_field("name", required=False)
        self._validate_number_field("poll_interval", required=False, positive=True)

    async def execute(self, context: BootstrapContext) -> None:
        genesis = read_genesis(context.genesis_source)
        client = context.primary_client()
        funded = context.funded_address

        context.token.raise_if_cancelled()
        tx_id = await client.create_blockchain(
            context.user,
            from_addresses=[funded],
            change_address=funded,
            subnet_id=context.subnet_id,
            vm_id=context.vm_id,
            name=self.config.get("name", DEFAULT_VM_NAME),
            genesis=genesis,
        )
        await wait_for_tx(
            client,
            tx_id,
            context.token,
            interval=self.config.get("poll_interval", WAIT_TIME),
            description=f"create blockchain tx ({tx_id})",
            log_fields={"vm_id": context.vm_id, "subnet_id": context.subnet_id},
        )

        blockchains = await client.get_blockchains()
        chain = find_blockchain(blockchains, context.subnet_id, context.vm_id)
        if chain is None:
            raise ConsistencyMismatchError(
                f"Could not find a blockchain on subnet {context.subnet_id}",
                expected=context.subnet_id,
                observed=sorted({c.subnet_id for c in blockchains}),
            )

        logger.info(
            "Blockchain %s created for VM %s",
            chain.id,
            context.vm_id,
            extra={
                "event": "blockchain_created",
                "blockchain_id": chain.id,
                "vm_id": context.vm_id,
                "tx_id": tx_id,
            },
        )
        context.blockchain_id = chain.id
