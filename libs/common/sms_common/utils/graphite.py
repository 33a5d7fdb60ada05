"""Graphite utilities for the service metrics simulator.

Endpoint parsing and resolution, and the publisher that pushes registry
snapshots over the Graphite plaintext protocol.
"""

import logging
import socket
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

from prometheus_client.bridge.graphite import GraphiteBridge

from sms_common.models.metrics import MetricsRegistry

logger = logging.getLogger(__name__)


def parse_graphite_endpoint(endpoint: str) -> tuple[str, int]:
    """Split a ``host:port`` endpoint (``[v6addr]:port`` for IPv6).

    Raises:
        ValueError: If the host or port is missing or the port is invalid
    """
    host, sep, port_str = endpoint.strip().rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address '{endpoint}'")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    if not host:
        raise ValueError(f"missing host in address '{endpoint}'")
    if not port_str.isdigit():
        raise ValueError(f"invalid port '{port_str}' in address '{endpoint}'")
    port = int(port_str)
    if not 0 < port < 65536:
        raise ValueError(f"port {port} out of range in address '{endpoint}'")
    return host, port


def resolve_graphite_address(endpoint: str) -> tuple[str, int]:
    """Parse and resolve a Graphite endpoint to a TCP (address, port).

    Raises:
        ValueError: If the endpoint cannot be parsed or the host cannot be resolved
    """
    host, port = parse_graphite_endpoint(endpoint)
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except socket.gaierror as e:
        raise ValueError(f"cannot resolve '{host}': {e}") from e
    if not infos:
        raise ValueError(f"no TCP address for '{host}'")
    sockaddr = infos[0][4]
    return sockaddr[0], sockaddr[1]


class MetricsPublisher(ABC):
    """Backend that receives full registry snapshots."""

    @abstractmethod
    def publish(self, registry: MetricsRegistry) -> int:
        """Publish every metric in the registry.

        Returns:
            Number of metrics published
        """


class GraphiteReporter(MetricsPublisher):
    """Pushes registry snapshots to Graphite, one TCP connection per flush.

    Keys are rendered by prometheus_client's GraphiteBridge, e.g.
    ``<prefix>.meter_total.name.auth_meter_logins``.
    """

    def __init__(
        self,
        address: tuple[str, int],
        prefix: str = "",
        timeout_seconds: float = 10.0,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the reporter.

        Args:
            address: Resolved (host, port) of the Graphite plaintext listener
            prefix: Optional prefix for every key
            timeout_seconds: Socket timeout for connecting and sending
            clock: Wall clock used for data point timestamps
        """
        self.address = address
        self.prefix = prefix
        self.timeout_seconds = timeout_seconds
        self._clock = clock

    def publish(self, registry: MetricsRegistry) -> int:
        """Send one snapshot of the registry.

        Raises:
            OSError: If the connection or send fails
        """
        bridge = GraphiteBridge(
            self.address,
            registry=registry.collector_registry,
            timeout_seconds=self.timeout_seconds,
            _timer=self._clock,
        )
        bridge.push(prefix=self.prefix)

        logger.debug(f"Sent {len(registry)} metrics to {self.address[0]}:{self.address[1]}")
        return len(registry)
