"""Readiness according to the standard gRPC health protocol (grpc.health.v1)."""

from datetime import timedelta

import grpc
from grpc_health.v1 import health_pb2, health_pb2_grpc

from corewait.conditions._channel import probe_over_channel
from corewait.poller import Condition

DEFAULT_DIAL_TIMEOUT = timedelta(seconds=1)


def check_grpc_health(address: str, timeout: timedelta = DEFAULT_DIAL_TIMEOUT, service: str = "") -> bool:
    def check(channel: grpc.Channel) -> int:
        stub = health_pb2_grpc.HealthStub(channel)
        response = stub.Check(health_pb2.HealthCheckRequest(service=service), timeout=timeout.total_seconds())
        return response.status

    status = probe_over_channel(address, timeout, check)
    return status == health_pb2.HealthCheckResponse.SERVING


def grpc_healthy_condition(
    address: str,
    timeout: timedelta = DEFAULT_DIAL_TIMEOUT,
    service: str = "",
) -> Condition:
    """Ready once `address` reports SERVING; unreachable or failing endpoints are just not ready."""
    return lambda: check_grpc_health(address, timeout, service)
