"""
Shared helpers - console, logging setup and small encoding utilities.
"""

import hashlib
import logging

from rich.console import Console
from rich.logging import RichHandler

from subnetbox.commands.constants import BLOCKCHAIN_PATH

console = Console()

LOG_FORMAT = "%(message)s"
LOG_DATE_FORMAT = "[%X]"


def configure_logging(verbose: bool = False) -> None:
    """Route subnetbox log records through a rich handler on the shared console."""
    level = logging.DEBUG if verbose else logging.INFO
    handler = RichHandler(
        console=console,
        show_path=verbose,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    root = logging.getLogger("subnetbox")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False

    # aiohttp is chatty at debug level
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def encode_hex_with_checksum(payload: bytes) -> str:
    """Hex encode bytes the way the node API expects.

    The last four bytes of the payload's sha256 digest are appended as a
    checksum and the result is prefixed with ``0x``.
    """
    checksum = hashlib.sha256(payload).digest()[-4:]
    return "0x" + (payload + checksum).hex()


def service_path(endpoint: str, chain_id: str) -> str:
    """Return the URL at which a deployed chain is served by a node."""
    return endpoint.rstrip("/") + BLOCKCHAIN_PATH.format(chain_id=chain_id)
