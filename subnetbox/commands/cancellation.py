"""
Cooperative cancellation for the bootstrap workflow.

A single CancelToken is shared by every step. Polling loops wait on it instead
of sleeping, so firing it wakes every blocked loop immediately, and steps
check it before issuing any cluster-mutating request.
"""

import asyncio
import logging
from typing import Optional

from subnetbox.commands.errors import BootstrapCancelledError

logger = logging.getLogger(__name__)

REASON_CANCELLED = "cancelled"
REASON_DEADLINE = "deadline exceeded"


class CancelToken:
    """A cancellation signal with an optional deadline.

    The deadline is expressed in seconds from creation and measured on the
    event loop clock. A token without a deadline only fires when cancel() is
    called.
    """

    def __init__(self, timeout: Optional[float] = None):
        self._event = asyncio.Event()
        self._reason: Optional[str] = None
        self._deadline: Optional[float] = None
        if timeout:
            self._deadline = asyncio.get_running_loop().time() + timeout

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    @property
    def cancelled(self) -> bool:
        if not self._event.is_set() and self._deadline_passed():
            self.cancel(REASON_DEADLINE)
        return self._event.is_set()

    def cancel(self, reason: str = REASON_CANCELLED) -> None:
        """Fire the token. Only the first reason is kept."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        logger.info(
            "Bootstrap cancellation requested: %s",
            reason,
            extra={"event": "cancel", "reason": reason},
        )

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise BootstrapCancelledError(
                f"Bootstrap cancelled ({self._reason})", reason=self._reason
            )

    async def sleep(self, interval: float) -> None:
        """Wait for ``interval`` seconds or until the token fires.

        Raises BootstrapCancelledError as soon as the token fires, so callers
        never wait longer than one interval after cancellation.
        """
        self.raise_if_cancelled()
        timeout = interval
        if self._deadline is not None:
            remaining = self._deadline - asyncio.get_running_loop().time()
            timeout = max(0.0, min(interval, remaining))
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            pass
        self.raise_if_cancelled()

    def _deadline_passed(self) -> bool:
        if self._deadline is None:
            return False
        return asyncio.get_running_loop().time() >= self._deadline
