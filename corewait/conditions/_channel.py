from collections.abc import Callable
from datetime import timedelta

import grpc

from corewait.logging_config import get_logger

log = get_logger(__name__)


def probe_over_channel[R](
    address: str,
    timeout: timedelta,
    probe: Callable[[grpc.Channel], R],
) -> R | None:
    """
    Dial `address` without TLS and run `probe` against the ready channel.

    Returns None when the channel does not become ready within `timeout` or
    when the probe's RPC fails; the dependency is assumed to still be coming
    up. The channel is closed before returning.
    """
    with grpc.insecure_channel(address) as channel:
        try:
            grpc.channel_ready_future(channel).result(timeout=timeout.total_seconds())
        except grpc.FutureTimeoutError:
            log.debug("gRPC endpoint not reachable yet", address=address)
            return None

        try:
            return probe(channel)
        except grpc.RpcError as e:
            log.debug("gRPC probe call failed", address=address, error=str(e))
            return None
