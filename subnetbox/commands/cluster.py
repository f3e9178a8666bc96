"""
Cluster handle - the fixed, ordered set of node endpoints and identities.

Starting and supervising the node processes is somebody else's job; the
handle only describes a cluster that is already running.
"""

import logging
from typing import Any, Optional, Sequence

from subnetbox.commands.client import NodeClientPool
from subnetbox.commands.constants import (
    BASE_HTTP_PORT,
    DEFAULT_HOST,
    DEFAULT_SCHEME,
    ERROR_IDENTITY_COUNT,
    NUM_NODES,
    PORT_STEP,
)
from subnetbox.commands.errors import ConfigurationError, ConsistencyMismatchError
from subnetbox.commands.retry import QUERY_RETRY_CONFIG, retry_async_call

logger = logging.getLogger(__name__)


def build_endpoints(
    count: int = NUM_NODES,
    host: str = DEFAULT_HOST,
    base_port: int = BASE_HTTP_PORT,
    port_step: int = PORT_STEP,
    scheme: str = DEFAULT_SCHEME,
) -> list[str]:
    """Endpoint URLs for ``count`` nodes listening on consecutive port pairs."""
    if count < 1:
        raise ConfigurationError(f"Node count must be at least 1 (got {count})")
    return [f"{scheme}://{host}:{base_port + i * port_step}" for i in range(count)]


class ClusterHandle:
    """Ordered endpoints and node identities of a running cluster.

    Both sequences are fixed at construction and share the same ordering, so
    ``list_identities()[i]`` is the node served at ``list_endpoints()[i]``.
    """

    def __init__(self, endpoints: Sequence[str], node_ids: Sequence[str]):
        if not endpoints:
            raise ConfigurationError("A cluster needs at least one endpoint")
        if len(endpoints) != len(node_ids):
            raise ConsistencyMismatchError(
                ERROR_IDENTITY_COUNT.format(
                    endpoints=len(endpoints), identities=len(node_ids)
                ),
                expected=len(endpoints),
                observed=len(node_ids),
            )
        self._endpoints = tuple(endpoints)
        self._node_ids = tuple(node_ids)

    def __len__(self) -> int:
        return len(self._endpoints)

    def list_endpoints(self) -> tuple[str, ...]:
        return self._endpoints

    def list_identities(self) -> tuple[str, ...]:
        return self._node_ids

    def nodes(self) -> list[tuple[str, str]]:
        """(node_id, endpoint) pairs in cluster order."""
        return list(zip(self._node_ids, self._endpoints))

    @classmethod
    async def from_config(
        cls, nodes_config: dict[str, Any], pool: NodeClientPool
    ) -> "ClusterHandle":
        """Build a handle from the ``nodes`` section of a workflow file.

        Node ids listed in the configuration are used as-is; otherwise each
        endpoint is asked for its id with ``info.getNodeID``.
        """
        endpoints = nodes_config.get("endpoints") or build_endpoints(
            count=nodes_config.get("count", NUM_NODES),
            host=nodes_config.get("host", DEFAULT_HOST),
            base_port=nodes_config.get("base_port", BASE_HTTP_PORT),
            port_step=nodes_config.get("port_step", PORT_STEP),
            scheme=nodes_config.get("scheme", DEFAULT_SCHEME),
        )
        node_ids: Optional[list[str]] = nodes_config.get("node_ids")
        if not node_ids:
            node_ids = await discover_node_ids(endpoints, pool)
        return cls(endpoints, node_ids)


async def discover_node_ids(
    endpoints: Sequence[str], pool: NodeClientPool
) -> list[str]:
    """Ask every endpoint for its node id, preserving endpoint order."""
    node_ids = []
    for url in endpoints:
        client = pool.client(url)
        node_id = await retry_async_call(client.get_node_id, config=QUERY_RETRY_CONFIG)
        logger.debug(
            "Discovered node %s at %s",
            node_id,
            url,
            extra={"event": "node_discovered", "node_id": node_id, "endpoint": url},
        )
        node_ids.append(node_id)
    return node_ids
