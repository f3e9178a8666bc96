"""
Base step class and shared run context for the bootstrap workflow.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from subnetbox.commands.cancellation import CancelToken
from subnetbox.commands.client import NodeClient, NodeClientPool, UserPass
from subnetbox.commands.cluster import ClusterHandle


@dataclass(frozen=True)
class ValidatorRegistration:
    """A validator registration as it was issued."""

    node_id: str
    subnet_id: str
    weight: int
    issue_time: int
    start_time: int
    end_time: int
    tx_id: str


@dataclass
class NodeConvergence:
    """What the workflow has observed about one node and the new chain."""

    node_id: str
    endpoint: str
    validating: bool = False
    bootstrapped: bool = False

    @property
    def converged(self) -> bool:
        return self.validating and self.bootstrapped


@dataclass(frozen=True)
class EndpointRecord:
    """One line of the final report: where a node serves the new chain."""

    node_id: str
    endpoint: str
    service_path: str
    vm_id: str
    blockchain_id: str

    def to_dict(self) -> dict[str, str]:
        return {
            "node_id": self.node_id,
            "endpoint": self.endpoint,
            "service_path": self.service_path,
            "vm_id": self.vm_id,
            "blockchain_id": self.blockchain_id,
        }


@dataclass
class BootstrapContext:
    """State carried forward from one step to the next during a single run.

    Identifiers produced by a step (funded address, subnet id, blockchain id)
    are written once by that step and only read afterwards.
    """

    cluster: ClusterHandle
    pool: NodeClientPool
    token: CancelToken
    user: UserPass
    vm_id: str
    genesis_source: Any
    funded_address: Optional[str] = None
    subnet_id: Optional[str] = None
    blockchain_id: Optional[str] = None
    registrations: list[ValidatorRegistration] = field(default_factory=list)
    convergence: list[NodeConvergence] = field(default_factory=list)

    def primary_client(self) -> NodeClient:
        """Transactions are issued through the first node of the cluster."""
        return self.pool.client(self.cluster.list_endpoints()[0])


class BaseStep:
    """Base class for all bootstrap steps.

    A step is built from its section of the workflow configuration, validates
    that section up front and then runs once against a BootstrapContext.
    Failures are raised as BootstrapError subclasses; the executor attaches
    the step name.
    """

    name = "step"

    def __init__(self, config: Optional[dict[str, Any]] = None):
        self.config = config or {}
        # Validate required fields before proceeding
        self._validate_required_fields()
        self._validate_field_types()

    def _get_required_fields(self) -> list[str]:
        """
        Define which fields are required for this step.
        Override this method in subclasses to specify required fields.
        """
        return []

    def _validate_required_fields(self) -> None:
        """Raise ValueError if any required field is missing or None."""
        required_fields = self._get_required_fields()
        missing_fields = [
            f for f in required_fields if f not in self.config or self.config[f] is None
        ]
        if missing_fields:
            raise ValueError(
                f"Step '{self.name}' is missing required fields: {', '.join(missing_fields)}. "
                f"Required fields: {', '.join(required_fields)}"
            )

    def _validate_field_types(self) -> None:
        """
        Validate that fields have the correct types.
        Override this method in subclasses to add type validation.
        """
        pass

    # =========================================================================
    # Field Validation Helper Methods
    # =========================================================================

    def _validate_string_field(
        self, field_name: str, *, required: bool = True, allow_empty: bool = False
    ) -> None:
        value = self.config.get(field_name)
        if value is None:
            if required:
                raise ValueError(
                    f"Step '{self.name}': '{field_name}' is required but not provided"
                )
            return
        if not isinstance(value, str):
            raise ValueError(f"Step '{self.name}': '{field_name}' must be a string")
        if not allow_empty and not value.strip():
            raise ValueError(
                f"Step '{self.name}': '{field_name}' cannot be empty or whitespace-only"
            )

    def _validate_integer_field(
        self,
        field_name: str,
        *,
        required: bool = True,
        positive: bool = False,
    ) -> None:
        value = self.config.get(field_name)
        if value is None:
            if required:
                raise ValueError(
                    f"Step '{self.name}': '{field_name}' is required but not provided"
                )
            return
        # bool is subclass of int, reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Step '{self.name}': '{field_name}' must be an integer")
        if positive and value <= 0:
            raise ValueError(
                f"Step '{self.name}': '{field_name}' must be a positive integer (got {value})"
            )

    def _validate_number_field(
        self, field_name: str, *, required: bool = True, positive: bool = False
    ) -> None:
        value = self.config.get(field_name)
        if value is None:
            if required:
                raise ValueError(
                    f"Step '{self.name}': '{field_name}' is required but not provided"
                )
            return
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Step '{self.name}': '{field_name}' must be a number")
        if positive and value <= 0:
            raise ValueError(
                f"Step '{self.name}': '{field_name}' must be a positive number (got {value})"
            )

    def _validate_boolean_field(self, field_name: str) -> None:
        value = self.config.get(field_name)
        if value is not None and not isinstance(value, bool):
            raise ValueError(f"Step '{self.name}': '{field_name}' must be a boolean")

    async def execute(self, context: BootstrapContext) -> None:
        """Run the step. Override in subclasses."""
        raise NotImplementedError
