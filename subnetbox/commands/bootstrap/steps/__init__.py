"""
Bootstrap steps, in the order the executor runs them.
"""

from subnetbox.commands.bootstrap.steps.add_validators import AddValidatorsStep
from subnetbox.commands.bootstrap.steps.base import (
    BaseStep,
    BootstrapContext,
    EndpointRecord,
    NodeConvergence,
    ValidatorRegistration,
)
from subnetbox.commands.bootstrap.steps.convergence import WaitForConvergenceStep
from subnetbox.commands.bootstrap.steps.create_blockchain import CreateBlockchainStep
from subnetbox.commands.bootstrap.steps.create_subnet import CreateSubnetStep
from subnetbox.commands.bootstrap.steps.keystore import SetupKeystoreStep

__all__ = [
    "BaseStep",
    "BootstrapContext",
    "EndpointRecord",
    "NodeConvergence",
    "ValidatorRegistration",
    "SetupKeystoreStep",
    "CreateSubnetStep",
    "AddValidatorsStep",
    "CreateBlockchainStep",
    "WaitForConvergenceStep",
]
