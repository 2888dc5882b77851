"""Ready-made waits for the services of a local test stack.

Every waiter polls with the defaults of `PollConfig` (2s interval, 45s
deadline) unless a config is passed in.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from corewait.conditions.grpc_health import grpc_healthy_condition
from corewait.conditions.http_health import bridge_serving_condition, rest_healthy_condition
from corewait.conditions.node import node_synced_condition
from corewait.conditions.prover import ProverStatusReader, prover_idle_condition
from corewait.logging_config import get_logger
from corewait.poller import Condition, PollConfig
from corewait.utils.duration import format_duration

log = get_logger(__name__)

DEFAULT_POLL_CONFIG = PollConfig()


@dataclass(frozen=True, slots=True)
class Endpoints:
    l1_network_url: str = "http://localhost:8545"
    l2_network_url: str = "http://localhost:8123"
    prover_address: str = "localhost:50051"
    bridge_address: str = "http://localhost:8080"


DEFAULT_ENDPOINTS = Endpoints()


def _wait(
    what: str,
    target: str,
    condition: Condition,
    config: PollConfig,
    cancel: threading.Event | None,
) -> None:
    log.info(
        "Waiting for service",
        service=what,
        target=target,
        interval=format_duration(config.interval),
        deadline=format_duration(config.deadline),
    )
    config.poll(condition, cancel=cancel)
    log.info("Service is ready", service=what, target=target)


def wait_grpc_healthy(
    address: str,
    config: PollConfig = DEFAULT_POLL_CONFIG,
    cancel: threading.Event | None = None,
) -> None:
    _wait("gRPC health", address, grpc_healthy_condition(address), config, cancel)


wait_healthy = wait_grpc_healthy


def wait_rest_healthy(
    address: str,
    config: PollConfig = DEFAULT_POLL_CONFIG,
    cancel: threading.Event | None = None,
) -> None:
    _wait("REST health", address, rest_healthy_condition(address), config, cancel)


def wait_node_synced(
    url: str,
    config: PollConfig = DEFAULT_POLL_CONFIG,
    cancel: threading.Event | None = None,
) -> None:
    _wait("node sync", url, node_synced_condition(url), config, cancel)


def wait_network_up(
    endpoints: Endpoints = DEFAULT_ENDPOINTS,
    config: PollConfig = DEFAULT_POLL_CONFIG,
    cancel: threading.Event | None = None,
) -> None:
    """Wait for the L1 node to finish syncing."""
    wait_node_synced(endpoints.l1_network_url, config, cancel)


def wait_core_up(
    endpoints: Endpoints = DEFAULT_ENDPOINTS,
    config: PollConfig = DEFAULT_POLL_CONFIG,
    cancel: threading.Event | None = None,
) -> None:
    """Wait for the L2 node to finish syncing."""
    wait_node_synced(endpoints.l2_network_url, config, cancel)


def wait_prover_idle(
    read_status: ProverStatusReader,
    endpoints: Endpoints = DEFAULT_ENDPOINTS,
    config: PollConfig = DEFAULT_POLL_CONFIG,
    cancel: threading.Event | None = None,
) -> None:
    address = endpoints.prover_address
    _wait("prover", address, prover_idle_condition(address, read_status), config, cancel)


def wait_bridge_serving(
    endpoints: Endpoints = DEFAULT_ENDPOINTS,
    config: PollConfig = DEFAULT_POLL_CONFIG,
    cancel: threading.Event | None = None,
) -> None:
    address = endpoints.bridge_address
    _wait("bridge", address, bridge_serving_condition(address), config, cancel)


def wait_for_stack(
    endpoints: Endpoints = DEFAULT_ENDPOINTS,
    config: PollConfig = DEFAULT_POLL_CONFIG,
    read_prover_status: ProverStatusReader | None = None,
    cancel: threading.Event | None = None,
) -> None:
    """
    Bring-up order of the local stack: L1 node, L2 node, prover, bridge.

    The prover is skipped when no status reader is given. Each step gets the
    full deadline of `config`.
    """
    wait_network_up(endpoints, config, cancel)
    wait_core_up(endpoints, config, cancel)
    if read_prover_status is not None:
        wait_prover_idle(read_prover_status, endpoints, config, cancel)
    else:
        log.info("No prover status reader given, skipping prover", target=endpoints.prover_address)
    wait_bridge_serving(endpoints, config, cancel)
