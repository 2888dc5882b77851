from collections.abc import Callable
from datetime import timedelta
from enum import IntEnum

import grpc

from corewait.conditions._channel import probe_over_channel
from corewait.logging_config import get_logger
from corewait.poller import Condition

log = get_logger(__name__)

DEFAULT_DIAL_TIMEOUT = timedelta(seconds=1)


class ProverState(IntEnum):
    """Status values reported by the prover's GetStatus call."""
    UNSPECIFIED = 0
    BOOTING = 1
    COMPUTING = 2
    IDLE = 3
    HALT = 4


# Performs the prover's status RPC on a ready channel. The generated prover
# stubs live with the caller, e.g.
#   lambda ch: ZKProverServiceStub(ch).GetStatus(GetStatusRequest()).state
# Values outside ProverState are passed through as plain ints.
ProverStatusReader = Callable[[grpc.Channel], ProverState | int]


def check_prover_idle(
    address: str,
    read_status: ProverStatusReader,
    timeout: timedelta = DEFAULT_DIAL_TIMEOUT,
) -> bool:
    state = probe_over_channel(address, timeout, read_status)
    if state is None:
        return False

    log.debug("Prover reported state", address=address, state=int(state))
    return state == ProverState.IDLE


def prover_idle_condition(
    address: str,
    read_status: ProverStatusReader,
    timeout: timedelta = DEFAULT_DIAL_TIMEOUT,
) -> Condition:
    return lambda: check_prover_idle(address, read_status, timeout)
