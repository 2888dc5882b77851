"""Waiting for submitted transactions to be mined."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Protocol

import requests

from corewait.errors import (
    MalformedResponseError,
    PollCancelledError,
    TransactionFailedError,
    TransactionNotFoundError,
    TransactionTimeoutError,
)
from corewait.jsonrpc import call_jsonrpc
from corewait.logging_config import get_logger

log = get_logger(__name__)

RECEIPT_STATUS_FAILED = 0
RECEIPT_STATUS_SUCCESSFUL = 1

TX_POLL_SLEEP = timedelta(seconds=1)


@dataclass(frozen=True, slots=True)
class Receipt:
    tx_hash: str
    status: int
    post_state: str = ""


class LedgerClient(Protocol):
    """The two ledger queries needed to follow a transaction until it is mined."""

    def transaction_by_hash(self, tx_hash: str) -> tuple[dict[str, Any], bool]:
        """Return (transaction, is_pending); raise TransactionNotFoundError if unknown."""
        ...

    def transaction_receipt(self, tx_hash: str) -> Receipt:
        ...


class JsonRpcLedgerClient:
    """LedgerClient backed by a node's Ethereum JSON-RPC endpoint."""

    def __init__(self, url: str, timeout: timedelta = timedelta(seconds=5), session: requests.Session | None = None):
        self.url = url
        self.timeout = timeout
        self._session = session

    def transaction_by_hash(self, tx_hash: str) -> tuple[dict[str, Any], bool]:
        tx = self._call("eth_getTransactionByHash", tx_hash)
        if tx is None:
            raise TransactionNotFoundError(tx_hash)
        if not isinstance(tx, dict):
            raise MalformedResponseError(f"eth_getTransactionByHash returned {tx!r}")

        # Mined transactions carry the number of their block.
        return tx, tx.get("blockNumber") is None

    def transaction_receipt(self, tx_hash: str) -> Receipt:
        raw = self._call("eth_getTransactionReceipt", tx_hash)
        if raw is None:
            raise TransactionNotFoundError(tx_hash)
        if not isinstance(raw, dict):
            raise MalformedResponseError(f"eth_getTransactionReceipt returned {raw!r}")

        return Receipt(
            tx_hash=tx_hash,
            status=_parse_quantity(raw.get("status"), field="status"),
            post_state=raw.get("root") or "",
        )

    def _call(self, method: str, tx_hash: str) -> Any:
        return call_jsonrpc(self.url, method, [tx_hash], timeout=self.timeout, session=self._session)


def wait_tx_mined(
    client: LedgerClient,
    tx_hash: str,
    timeout: timedelta,
    sleep: timedelta = TX_POLL_SLEEP,
    cancel: threading.Event | None = None,
) -> Receipt:
    """
    Block until `tx_hash` leaves the pending pool, then check its receipt.

    The timeout is checked once per iteration before sleeping, so the call can
    overrun `timeout` by up to one `sleep`.

    Raises:
        TransactionTimeoutError: the transaction was still unknown or pending after `timeout`
        TransactionFailedError: the transaction was mined but its execution failed
        PollCancelledError: `cancel` was set while sleeping
    """
    waiter = cancel if cancel is not None else threading.Event()
    start = time.monotonic()
    attempts = 0

    log.info("Waiting for transaction to be mined", tx_hash=tx_hash, timeout=timeout.total_seconds())
    while True:
        if time.monotonic() - start > timeout.total_seconds():
            log.warning("Transaction not mined before timeout", tx_hash=tx_hash, attempts=attempts)
            raise TransactionTimeoutError(tx_hash, timeout)

        if waiter.wait(timeout=sleep.total_seconds()):
            raise PollCancelledError(attempts)
        attempts += 1

        try:
            _, is_pending = client.transaction_by_hash(tx_hash)
        except TransactionNotFoundError:
            log.debug("Transaction not visible yet", tx_hash=tx_hash, attempt=attempts)
            continue

        if is_pending:
            log.debug("Transaction still pending", tx_hash=tx_hash, attempt=attempts)
            continue

        receipt = client.transaction_receipt(tx_hash)
        if receipt.status == RECEIPT_STATUS_FAILED:
            log.warning("Transaction failed", tx_hash=tx_hash, post_state=receipt.post_state)
            raise TransactionFailedError(receipt)

        log.info("Transaction mined", tx_hash=tx_hash, attempts=attempts)
        return receipt


def _parse_quantity(value: Any, field: str) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 16)
        except ValueError:
            pass
    raise MalformedResponseError(f"receipt {field} is not a hex quantity: {value!r}")
