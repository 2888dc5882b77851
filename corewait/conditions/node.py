from datetime import timedelta

import requests

from corewait.errors import MalformedResponseError
from corewait.jsonrpc import call_jsonrpc
from corewait.logging_config import get_logger
from corewait.poller import Condition

log = get_logger(__name__)


def is_node_synced(url: str, timeout: timedelta) -> bool:
    """
    Ask a node whether it is still syncing via `eth_syncing`.

    Returns True once the node answers `false`. A node that is not accepting
    connections yet is reported as not synced rather than failing the wait.
    """
    try:
        result = call_jsonrpc(url, "eth_syncing", timeout=timeout)
    except (requests.ConnectionError, requests.Timeout):
        log.debug("Node not accepting connections yet", url=url)
        return False

    # While syncing, nodes answer either `true` or a progress object.
    if isinstance(result, dict):
        log.debug("Node reported sync progress", url=url, progress=result)
        return False

    if not isinstance(result, bool):
        raise MalformedResponseError(f"eth_syncing at {url} returned unexpected result {result!r}")

    return not result


def node_synced_condition(url: str, timeout: timedelta = timedelta(seconds=1)) -> Condition:
    return lambda: is_node_synced(url, timeout)
