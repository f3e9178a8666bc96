"""
Setup keystore step - create the local user and import the funded key.
"""

import logging

from subnetbox.commands.bootstrap.steps.base import BaseStep, BootstrapContext
from subnetbox.commands.constants import PRIVATE_KEY_PREFIX, STEP_SETUP_KEYSTORE

logger = logging.getLogger(__name__)


class SetupKeystoreStep(BaseStep):
    """Create the keystore user on the first node and fund it.

    Every later transaction is paid for by, and controlled by, the address
    this step imports.
    """

    name = STEP_SETUP_KEYSTORE

    def _get_required_fields(self) -> list[str]:
        return ["private_key"]

    def _validate_field_types(self) -> None:
        self._validate_string_field("private_key")
        if not self.config["private_key"].startswith(PRIVATE_KEY_PREFIX):
            raise ValueError(
                f"Step '{self.name}': 'private_key' must start with '{PRIVATE_KEY_PREFIX}'"
            )

    async def execute(self, context: BootstrapContext) -> None:
        client = context.primary_client()

        context.token.raise_if_cancelled()
        await client.create_user(context.user)
        logger.info(
            "Created keystore user %s",
            context.user.username,
            extra={"event": "keystore_user_created", "endpoint": client.url},
        )

        context.token.raise_if_cancelled()
        address = await client.import_key(context.user, self.config["private_key"])
        balance = await client.get_balance([address])
        logger.info(
            "Found %d on address %s",
            balance,
            address,
            extra={"event": "funded_key_imported", "address": address, "balance": balance},
        )
        context.funded_address = address
