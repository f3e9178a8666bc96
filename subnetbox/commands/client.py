"""
Node client - JSON-RPC access to one node's platform, info and keystore APIs.

All clients created by a NodeClientPool share a single aiohttp.ClientSession
so the handful of nodes in a local cluster reuse their connections for the
whole bootstrap run.

Errors are mapped onto the bootstrap taxonomy:
- aiohttp failures, timeouts and unparseable responses -> TransportError
- JSON-RPC ``error`` objects returned by the node -> RejectedOperationError
"""

import asyncio
import itertools
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import aiohttp

from subnetbox.commands.constants import (
    DEFAULT_CONNECTION_TIMEOUT,
    DEFAULT_READ_TIMEOUT,
    FIELD_ADDRESS,
    FIELD_BALANCE,
    FIELD_BLOCKCHAINS,
    FIELD_IS_BOOTSTRAPPED,
    FIELD_NODE_ID,
    FIELD_STATUS,
    FIELD_SUBNETS,
    FIELD_TX_ID,
    GENESIS_ENCODING,
    INFO_API,
    KEYSTORE_API,
    PLATFORM_API,
)
from subnetbox.commands.errors import RejectedOperationError, TransportError
from subnetbox.commands.utils import encode_hex_with_checksum

# Connection pooling configuration
DEFAULT_POOL_CONNECTIONS_PER_HOST = 4


@dataclass(frozen=True)
class UserPass:
    """Keystore credentials used to sign platform transactions."""

    username: str
    password: str = field(repr=False)

    def as_params(self) -> dict[str, str]:
        return {"username": self.username, "password": self.password}


@dataclass(frozen=True)
class Subnet:
    """A subnet as reported by platform.getSubnets."""

    id: str
    control_keys: tuple[str, ...] = ()
    threshold: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Subnet":
        return cls(
            id=data["id"],
            control_keys=tuple(data.get("controlKeys") or ()),
            threshold=int(data.get("threshold") or 0),
        )


@dataclass(frozen=True)
class Blockchain:
    """A blockchain as reported by platform.getBlockchains."""

    id: str
    name: str
    subnet_id: str
    vm_id: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Blockchain":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            subnet_id=data["subnetID"],
            vm_id=data.get("vmID", ""),
        )


class NodeClient:
    """JSON-RPC client for a single node endpoint."""

    def __init__(
        self,
        url: str,
        session: aiohttp.ClientSession,
        timeout: Optional[aiohttp.ClientTimeout] = None,
    ):
        self.url = url.rstrip("/")
        self.session = session
        self.timeout = timeout or aiohttp.ClientTimeout(
            total=DEFAULT_READ_TIMEOUT, connect=DEFAULT_CONNECTION_TIMEOUT
        )
        self._request_ids = itertools.count(1)

    async def call(
        self,
        api: str,
        method: str,
        params: Optional[dict[str, Any]] = None,
        required: tuple[str, ...] = (),
    ) -> dict[str, Any]:
        """Issue one JSON-RPC request and return its ``result`` object.

        A reply without a ``result`` object, or whose result lacks one of the
        ``required`` fields, is raised as a TransportError.
        """
        url = f"{self.url}{api}"
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params or {},
        }
        try:
            async with self.session.post(
                url, json=payload, timeout=self.timeout
            ) as response:
                status = response.status
                text = await response.text()
        except asyncio.TimeoutError as e:
            raise TransportError(f"{method} timed out", url=url) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"{method} failed: {e}", url=url) from e

        try:
            body = json.loads(text) if text else {}
        except ValueError as e:
            raise TransportError(
                f"{method} returned a non-JSON response", url=url, status_code=status
            ) from e

        if isinstance(body, dict) and body.get("error"):
            error = body["error"]
            if isinstance(error, dict):
                raise RejectedOperationError(
                    f"{method} rejected: {error.get('message', error)}",
                    url=url,
                    method=method,
                    rpc_code=error.get("code"),
                )
            raise RejectedOperationError(
                f"{method} rejected: {error}", url=url, method=method
            )
        if status >= 400 or not isinstance(body, dict):
            raise TransportError(
                f"{method} returned HTTP {status}", url=url, status_code=status
            )
        result = body.get("result")
        if not isinstance(result, dict):
            raise TransportError(f"{method} returned no result", url=url)
        for name in required:
            if result.get(name) is None:
                raise TransportError(f"{method} returned no {name}", url=url)
        return result

    def _parse_entries(
        self, api: str, method: str, entries: Any, parser: Callable[[dict], Any]
    ) -> list:
        """Parse a listing, raising TransportError on a malformed entry."""
        try:
            return [parser(item) for item in entries or []]
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError(
                f"{method} returned a malformed entry: {e!r}", url=f"{self.url}{api}"
            ) from e

    # Keystore API

    async def create_user(self, user: UserPass) -> None:
        await self.call(KEYSTORE_API, "keystore.createUser", user.as_params())

    # Platform API

    async def import_key(self, user: UserPass, private_key: str) -> str:
        result = await self.call(
            PLATFORM_API,
            "platform.importKey",
            {**user.as_params(), "privateKey": private_key},
            required=(FIELD_ADDRESS,),
        )
        return result[FIELD_ADDRESS]

    async def get_balance(self, addresses: list[str]) -> int:
        result = await self.call(
            PLATFORM_API, "platform.getBalance", {"addresses": addresses}
        )
        try:
            return int(result.get(FIELD_BALANCE) or 0)
        except (TypeError, ValueError) as e:
            raise TransportError(
                f"platform.getBalance returned a malformed balance: {e}",
                url=f"{self.url}{PLATFORM_API}",
            ) from e

    async def create_subnet(
        self,
        user: UserPass,
        from_addresses: list[str],
        change_address: str,
        control_keys: list[str],
        threshold: int,
    ) -> str:
        result = await self.call(
            PLATFORM_API,
            "platform.createSubnet",
            {
                **user.as_params(),
                "from": from_addresses,
                "changeAddr": change_address,
                "controlKeys": control_keys,
                "threshold": threshold,
            },
            required=(FIELD_TX_ID,),
        )
        return result[FIELD_TX_ID]

    async def add_subnet_validator(
        self,
        user: UserPass,
        from_addresses: list[str],
        change_address: str,
        subnet_id: str,
        node_id: str,
        weight: int,
        start_time: int,
        end_time: int,
    ) -> str:
        result = await self.call(
            PLATFORM_API,
            "platform.addSubnetValidator",
            {
                **user.as_params(),
                "from": from_addresses,
                "changeAddr": change_address,
                "subnetID": subnet_id,
                "nodeID": node_id,
                "weight": weight,
                "startTime": start_time,
                "endTime": end_time,
            },
            required=(FIELD_TX_ID,),
        )
        return result[FIELD_TX_ID]

    async def create_blockchain(
        self,
        user: UserPass,
        from_addresses: list[str],
        change_address: str,
        subnet_id: str,
        vm_id: str,
        name: str,
        genesis: bytes,
    ) -> str:
        result = await self.call(
            PLATFORM_API,
            "platform.createBlockchain",
            {
                **user.as_params(),
                "from": from_addresses,
                "changeAddr": change_address,
                "subnetID": subnet_id,
                "vmID": vm_id,
                "fxIDs": [],
                "name": name,
                "genesisData": encode_hex_with_checksum(genesis),
                "encoding": GENESIS_ENCODING,
            },
            required=(FIELD_TX_ID,),
        )
        return result[FIELD_TX_ID]

    async def get_tx_status(self, tx_id: str) -> str:
        result = await self.call(PLATFORM_API, "platform.getTxStatus", {"txID": tx_id})
        return result.get(FIELD_STATUS, "")

    async def get_subnets(self) -> list[Subnet]:
        method = "platform.getSubnets"
        result = await self.call(PLATFORM_API, method, {"ids": []})
        return self._parse_entries(
            PLATFORM_API, method, result.get(FIELD_SUBNETS), Subnet.from_api
        )

    async def get_blockchains(self) -> list[Blockchain]:
        method = "platform.getBlockchains"
        result = await self.call(PLATFORM_API, method)
        return self._parse_entries(
            PLATFORM_API, method, result.get(FIELD_BLOCKCHAINS), Blockchain.from_api
        )

    async def get_blockchain_status(self, blockchain_id: str) -> str:
        result = await self.call(
            PLATFORM_API,
            "platform.getBlockchainStatus",
            {"blockchainID": blockchain_id},
        )
        return result.get(FIELD_STATUS, "")

    # Info API

    async def is_bootstrapped(self, chain: str) -> bool:
        result = await self.call(INFO_API, "info.isBootstrapped", {"chain": chain})
        return bool(result.get(FIELD_IS_BOOTSTRAPPED))

    async def get_node_id(self) -> str:
        result = await self.call(
            INFO_API, "info.getNodeID", required=(FIELD_NODE_ID,)
        )
        return result[FIELD_NODE_ID]


class NodeClientPool:
    """Owns the shared aiohttp session and hands out per-endpoint clients.

    Usage:
        async with NodeClientPool() as pool:
            client = pool.client("http://127.0.0.1:9650")
            status = await client.get_tx_status(tx_id)
    """

    def __init__(
        self,
        connection_timeout: float = DEFAULT_CONNECTION_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        pool_connections_per_host: int = DEFAULT_POOL_CONNECTIONS_PER_HOST,
    ):
        self._timeout = aiohttp.ClientTimeout(
            total=read_timeout, connect=connection_timeout
        )
        self._pool_connections_per_host = pool_connections_per_host
        self._session: Optional[aiohttp.ClientSession] = None
        self._clients: dict[str, NodeClient] = {}

    async def __aenter__(self) -> "NodeClientPool":
        connector = aiohttp.TCPConnector(limit_per_host=self._pool_connections_per_host)
        self._session = aiohttp.ClientSession(
            connector=connector,
            cookie_jar=aiohttp.DummyCookieJar(),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
        self._clients.clear()

    def client(self, url: str) -> NodeClient:
        """Return the client for ``url``, creating it on first use."""
        if self._session is None:
            raise RuntimeError("NodeClientPool must be entered before use")
        if url not in self._clients:
            self._clients[url] = NodeClient(url, self._session, self._timeout)
        return self._clients[url]
