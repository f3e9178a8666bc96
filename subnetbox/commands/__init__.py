"""
Commands module - All available CLI commands.
"""

from subnetbox.commands.bootstrap import bootstrap
from subnetbox.commands.errors import (
    AbortedOperationError,
    BootstrapCancelledError,
    BootstrapError,
    ConfigurationError,
    ConsistencyMismatchError,
    GenesisReadError,
    RejectedOperationError,
    SubnetboxError,
    TransportError,
)
from subnetbox.commands.health import health

__all__ = [
    # Commands
    "bootstrap",
    "health",
    # Error classes
    "SubnetboxError",
    "ConfigurationError",
    "BootstrapError",
    "TransportError",
    "RejectedOperationError",
    "AbortedOperationError",
    "ConsistencyMismatchError",
    "GenesisReadError",
    "BootstrapCancelledError",
]
