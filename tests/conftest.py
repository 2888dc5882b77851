import socket
from collections.abc import Iterator
from concurrent import futures

import grpc
import pytest
from grpc_health.v1 import health, health_pb2, health_pb2_grpc

from tests.utils.stub_server import StubServer, StubState


def _pick_free_port() -> int:
    # Binding to port 0 asks the OS for an arbitrary free port; the socket is
    # closed right away so the port can be handed to a server (or left unused
    # to stand in for a dependency that has not started yet).
    sock = socket.socket()
    sock.bind(("localhost", 0))
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

    port: int = sock.getsockname()[1]
    sock.close()

    return port


@pytest.fixture()
def free_localhost_port():
    """Function-scoped fixture to get a free port for each test."""
    return _pick_free_port()


@pytest.fixture()
def stub_state() -> StubState:
    return StubState()


@pytest.fixture()
def stub_server(stub_state: StubState, free_localhost_port: int) -> Iterator[StubServer]:
    """HTTP stub serving `/healthz` and JSON-RPC, driven through `stub_state`."""
    server = StubServer(stub_state, free_localhost_port)
    server.start()
    yield server
    server.stop()


@pytest.fixture()
def health_servicer() -> health.HealthServicer:
    servicer = health.HealthServicer()
    servicer.set("", health_pb2.HealthCheckResponse.NOT_SERVING)
    return servicer


@pytest.fixture()
def grpc_health_address(health_servicer: health.HealthServicer) -> Iterator[str]:
    """Address of an in-process gRPC server exposing grpc.health.v1."""
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=2))
    health_pb2_grpc.add_HealthServicer_to_server(health_servicer, server)
    port = server.add_insecure_port("127.0.0.1:0")
    server.start()
    yield f"127.0.0.1:{port}"
    server.stop(grace=None)


@pytest.fixture()
def unreachable_address() -> str:
    """host:port with nothing listening on it."""
    return f"127.0.0.1:{_pick_free_port()}"
