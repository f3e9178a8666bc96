"""Pytest configuration and shared fakes for subnetbox tests.

FakeLedger stands in for a running cluster: it hands out per-endpoint
FakeNodeClient objects through FakePool, records every call, and plays back
scripted status sequences for transactions, chain status and bootstrapping.
"""

import itertools
from typing import Any, Callable, Optional

import pytest

from subnetbox.commands.bootstrap.config import apply_defaults
from subnetbox.commands.bootstrap.run.executor import BootstrapExecutor, build_steps
from subnetbox.commands.client import Blockchain, Subnet, UserPass
from subnetbox.commands.cluster import ClusterHandle, build_endpoints
from subnetbox.commands.constants import (
    CHAIN_STATUS_VALIDATING,
    TX_STATUS_COMMITTED,
    TX_STATUS_PROCESSING,
)

FUNDED_ADDRESS = "P-local18jma8ppw3nhx5r4ap8clazz0dps7rv5u00z96u"
SUBNET_ID = "BKBZ6xXTnT86B4L5fp8rvtcmNSpvtNz8En9jG61ywV2uWyeHy"
CHAIN_ID = "C1"
VM_ID = "M1"
FIXED_NOW = 1_700_000_000


def _next(script: list) -> Any:
    """Pop the next scripted value; the last one repeats forever."""
    if len(script) > 1:
        return script.pop(0)
    return script[0]


class FakeLedger:
    """Shared cluster state seen by every fake node client."""

    def __init__(self, node_count: int = 5, subnet_id: str = SUBNET_ID, chain_id: str = CHAIN_ID):
        self.endpoints = build_endpoints(count=node_count)
        self.node_ids = [f"NodeID-{i}" for i in range(node_count)]
        self.subnet_id = subnet_id
        self.chain_id = chain_id
        self.funded_address = FUNDED_ADDRESS
        # When set, the created chain is reported on this subnet instead
        self.chain_subnet_id: Optional[str] = None
        # When set, the created subnet reports these owners instead
        self.subnet_control_keys: Optional[tuple[str, ...]] = None
        self.subnet_threshold: Optional[int] = None
        self.vm_id = VM_ID
        self.now = FIXED_NOW
        self.subnets: list[Subnet] = []
        self.blockchains: list[Blockchain] = []
        self.calls: list[tuple[str, str, dict]] = []
        self._tx_ids = itertools.count(1)
        self._effects: dict[str, Callable[[], None]] = {}
        # tx kind -> scripted statuses, consumed per transaction
        self.tx_scripts: dict[str, list[str]] = {}
        # endpoint -> scripted values
        self.chain_status: dict[str, list[str]] = {
            url: ["Created", CHAIN_STATUS_VALIDATING] for url in self.endpoints
        }
        self.bootstrapped: dict[str, list[bool]] = {
            url: [False, True] for url in self.endpoints
        }
        self._tx_status: dict[str, list[str]] = {}
        self.hooks: dict[str, Callable[[str, dict], None]] = {}

    def record(self, url: str, method: str, **params: Any) -> None:
        self.calls.append((url, method, params))
        hook = self.hooks.get(method)
        if hook is not None:
            hook(url, params)

    def methods(self) -> list[str]:
        return [method for _, method, _ in self.calls]

    def submit(self, kind: str, effect: Optional[Callable[[], None]] = None) -> str:
        tx_id = f"tx-{kind}-{next(self._tx_ids)}"
        self._tx_status[tx_id] = list(
            self.tx_scripts.get(kind, [TX_STATUS_PROCESSING, TX_STATUS_COMMITTED])
        )
        if effect is not None:
            self._effects[tx_id] = effect
        return tx_id

    def tx_status(self, tx_id: str) -> str:
        status = _next(self._tx_status[tx_id])
        if status == TX_STATUS_COMMITTED and tx_id in self._effects:
            self._effects.pop(tx_id)()
        return status


class FakeNodeClient:
    def __init__(self, url: str, ledger: FakeLedger):
        self.url = url
        self.ledger = ledger

    async def create_user(self, user):
        self.ledger.record(self.url, "create_user", username=user.username)

    async def import_key(self, user, private_key):
        self.ledger.record(self.url, "import_key", private_key=private_key)
        return self.ledger.funded_address

    async def get_balance(self, addresses):
        self.ledger.record(self.url, "get_balance", addresses=addresses)
        return 300_000_000_000_000_000

    async def create_subnet(self, user, from_addresses, change_address, control_keys, threshold):
        self.ledger.record(
            self.url,
            "create_subnet",
            control_keys=control_keys,
            threshold=threshold,
        )
        subnet = Subnet(
            self.ledger.subnet_id,
            self.ledger.subnet_control_keys or tuple(control_keys),
            self.ledger.subnet_threshold or threshold,
        )
        return self.ledger.submit("subnet", lambda: self.ledger.subnets.append(subnet))

    async def add_subnet_validator(
        self, user, from_addresses, change_address, subnet_id, node_id, weight, start_time, end_time
    ):
        self.ledger.record(
            self.url,
            "add_subnet_validator",
            subnet_id=subnet_id,
            node_id=node_id,
            weight=weight,
            start_time=start_time,
            end_time=end_time,
        )
        return self.ledger.submit("validator")

    async def create_blockchain(self, user, from_addresses, change_address, subnet_id, vm_id, name, genesis):
        self.ledger.record(
            self.url,
            "create_blockchain",
            subnet_id=subnet_id,
            vm_id=vm_id,
            name=name,
            genesis=genesis,
        )
        chain = Blockchain(
            self.ledger.chain_id, name, self.ledger.chain_subnet_id or subnet_id, vm_id
        )
        return self.ledger.submit("blockchain", lambda: self.ledger.blockchains.append(chain))

    async def get_tx_status(self, tx_id):
        self.ledger.record(self.url, "get_tx_status", tx_id=tx_id)
        return self.ledger.tx_status(tx_id)

    async def get_subnets(self):
        self.ledger.record(self.url, "get_subnets")
        return list(self.ledger.subnets)

    async def get_blockchains(self):
        self.ledger.record(self.url, "get_blockchains")
        return list(self.ledger.blockchains)

    async def get_blockchain_status(self, blockchain_id):
        self.ledger.record(self.url, "get_blockchain_status", blockchain_id=blockchain_id)
        return _next(self.ledger.chain_status[self.url])

    async def is_bootstrapped(self, chain):
        self.ledger.record(self.url, "is_bootstrapped", chain=chain)
        return _next(self.ledger.bootstrapped[self.url])

    async def get_node_id(self):
        self.ledger.record(self.url, "get_node_id")
        return self.ledger.node_ids[self.ledger.endpoints.index(self.url)]


class FakePool:
    """Drop-in for NodeClientPool handing out fake clients."""

    def __init__(self, ledger: FakeLedger):
        self.ledger = ledger
        self._clients: dict[str, FakeNodeClient] = {}

    def client(self, url: str) -> FakeNodeClient:
        if url not in self._clients:
            self._clients[url] = FakeNodeClient(url, self.ledger)
        return self._clients[url]


def fast_config(**sections: Any) -> dict[str, Any]:
    """Default configuration with millisecond polling."""
    config = {"polling": {"interval": 0.001, "long_interval": 0.001}}
    for name, values in sections.items():
        config.setdefault(name, {}).update(values)
    return apply_defaults(config)


def make_executor(ledger: FakeLedger, config: Optional[dict] = None, clock=None) -> BootstrapExecutor:
    config = config or fast_config()
    cluster = ClusterHandle(ledger.endpoints, ledger.node_ids)
    steps = build_steps(config, clock=clock or (lambda: FIXED_NOW))
    return BootstrapExecutor(cluster, FakePool(ledger), steps, UserPass("test", "secret"))


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def pool(ledger):
    return FakePool(ledger)


@pytest.fixture
def config_factory():
    return fast_config


@pytest.fixture
def executor_factory():
    return make_executor


@pytest.fixture
def ledger_factory():
    return FakeLedger
