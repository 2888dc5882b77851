"""HTTP `/healthz` probes.

Neither probe here is lenient: if the endpoint cannot be reached the request
exception propagates and stops the poll. Sibling probes (gRPC, node sync,
prover) treat connection failures as "not ready yet" instead.
"""

from datetime import timedelta

import requests

from corewait.errors import MalformedResponseError
from corewait.logging_config import get_logger
from corewait.poller import Condition

log = get_logger(__name__)

HEALTHZ_ENDPOINT = "/healthz"
BRIDGE_SERVING_STATUS = "SERVING"


def check_rest_health(address: str, timeout: timedelta, endpoint: str = HEALTHZ_ENDPOINT) -> bool:
    """
    Check HTTP service health via endpoint; only a 200 counts as healthy.
    """
    url = f"{address}{endpoint}"
    with requests.get(url, timeout=timeout.total_seconds()) as response:
        log.debug("Health endpoint answered", url=url, status_code=response.status_code)
        return response.status_code == 200


def check_bridge_status(address: str, timeout: timedelta, endpoint: str = HEALTHZ_ENDPOINT) -> bool:
    url = f"{address}{endpoint}"
    with requests.get(url, timeout=timeout.total_seconds()) as response:
        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Bridge health at {url} returned a non-JSON body") from e

    if not isinstance(body, dict):
        raise MalformedResponseError(f"Bridge health at {url} returned {body!r}")

    status = body.get("Status")
    log.debug("Bridge reported status", url=url, status=status)
    return status == BRIDGE_SERVING_STATUS


def rest_healthy_condition(address: str, timeout: timedelta = timedelta(seconds=1)) -> Condition:
    return lambda: check_rest_health(address, timeout)


def bridge_serving_condition(address: str, timeout: timedelta = timedelta(seconds=1)) -> Condition:
    return lambda: check_bridge_status(address, timeout)
