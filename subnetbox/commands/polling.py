"""
Confirmation polling - wait for an asynchronous cluster operation to settle.

Every bootstrap step follows the same shape: submit something, then keep
asking a node about it until the answer is terminal. wait_until_terminal is
that loop, parameterised by an accessor that turns one query into an
Observation. The accessors for the queries the workflow needs live here too.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from subnetbox.commands.cancellation import CancelToken
from subnetbox.commands.client import NodeClient
from subnetbox.commands.constants import (
    CHAIN_STATUS_VALIDATING,
    TX_STATUS_ABORTED,
    TX_STATUS_COMMITTED,
    TX_STATUS_DROPPED,
)
from subnetbox.commands.errors import (
    AbortedOperationError,
    RejectedOperationError,
    TransportError,
)

logger = logging.getLogger(__name__)


class PollStatus(enum.Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class Observation:
    """One answer from a status accessor."""

    status: PollStatus
    detail: str = ""


Accessor = Callable[[], Awaitable[Observation]]


async def wait_until_terminal(
    accessor: Accessor,
    token: CancelToken,
    *,
    interval: float,
    description: str,
    operation_id: Optional[str] = None,
    log_fields: Optional[dict[str, Any]] = None,
) -> Observation:
    """Poll ``accessor`` every ``interval`` seconds until it reports a terminal state.

    Args:
        accessor: Coroutine function returning the current Observation
        token: Shared cancellation token, checked on every iteration boundary
        interval: Seconds to wait between observations
        description: Human readable name of what is being waited for
        operation_id: Identifier attached to errors and log records
        log_fields: Extra structured fields for every progress record

    Returns:
        The successful Observation.

    Raises:
        AbortedOperationError: The accessor reported a failure terminal state.
        BootstrapCancelledError: The token fired before success was observed.

    A query that fails in transit or is refused by the node counts as "not
    yet": the loop logs it and keeps polling. There is no attempt limit; only
    the token ends an unproductive wait.
    """
    fields = {"description": description, **(log_fields or {})}
    if operation_id:
        fields["operation_id"] = operation_id

    attempt = 0
    while True:
        token.raise_if_cancelled()
        attempt += 1
        try:
            observation = await accessor()
        except (TransportError, RejectedOperationError) as e:
            logger.warning(
                "Status query for %s failed, retrying: %s",
                description,
                e,
                extra={"event": "poll_error", "attempt": attempt, **fields},
            )
            observation = Observation(PollStatus.PENDING, str(e))

        # An answer that arrives after cancellation is discarded
        token.raise_if_cancelled()

        if observation.status is PollStatus.SUCCESS:
            logger.info(
                "%s confirmed",
                description,
                extra={"event": "poll_success", "attempt": attempt, **fields},
            )
            return observation
        if observation.status is PollStatus.FAILURE:
            logger.error(
                "%s failed with status %s",
                description,
                observation.detail,
                extra={"event": "poll_failure", "attempt": attempt, **fields},
            )
            raise AbortedOperationError(
                f"{description} failed with status {observation.detail}",
                operation_id=operation_id,
                status=observation.detail,
            )

        logger.info(
            "Waiting for %s (attempt %d)",
            description,
            attempt,
            extra={
                "event": "poll_pending",
                "attempt": attempt,
                "observed": observation.detail,
                **fields,
            },
        )
        await token.sleep(interval)


def tx_status_accessor(client: NodeClient, tx_id: str) -> Accessor:
    """Committed succeeds, Aborted and Dropped fail, anything else is pending."""

    async def accessor() -> Observation:
        status = await client.get_tx_status(tx_id)
        if status == TX_STATUS_COMMITTED:
            return Observation(PollStatus.SUCCESS, status)
        if status in (TX_STATUS_ABORTED, TX_STATUS_DROPPED):
            return Observation(PollStatus.FAILURE, status)
        return Observation(PollStatus.PENDING, status)

    return accessor


def validating_accessor(client: NodeClient, blockchain_id: str) -> Accessor:
    async def accessor() -> Observation:
        status = await client.get_blockchain_status(blockchain_id)
        if status == CHAIN_STATUS_VALIDATING:
            return Observation(PollStatus.SUCCESS, status)
        return Observation(PollStatus.PENDING, status)

    return accessor


def bootstrapped_accessor(client: NodeClient, chain: str) -> Accessor:
    async def accessor() -> Observation:
        if await client.is_bootstrapped(chain):
            return Observation(PollStatus.SUCCESS, "bootstrapped")
        return Observation(PollStatus.PENDING, "not bootstrapped")

    return accessor


async def wait_for_tx(
    client: NodeClient,
    tx_id: str,
    token: CancelToken,
    *,
    interval: float,
    description: str,
    log_fields: Optional[dict[str, Any]] = None,
) -> None:
    """Block until ``tx_id`` is committed."""
    await wait_until_terminal(
        tx_status_accessor(client, tx_id),
        token,
        interval=interval,
        description=description,
        operation_id=tx_id,
        log_fields=log_fields,
    )
