from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from corewait.utils.duration import format_duration

if TYPE_CHECKING:
    from corewait.transactions import Receipt


class CorewaitError(Exception):
    """Base class for every error raised by corewait itself."""


class DeadlineExceededError(CorewaitError, TimeoutError):
    def __init__(self, deadline: timedelta):
        super().__init__(f"Condition not met after {format_duration(deadline)}")
        self.deadline = deadline


class PollCancelledError(CorewaitError):
    def __init__(self, attempts: int):
        super().__init__(f"Polling cancelled after {attempts} attempt(s)")
        self.attempts = attempts


class MalformedResponseError(CorewaitError, ValueError):
    """A probed service answered with a payload we cannot interpret."""


class JsonRpcError(CorewaitError):
    def __init__(self, code: int | None, message: str):
        super().__init__(f"JSON-RPC error {code}: {message}")
        self.code = code
        self.message = message


class TransactionNotFoundError(CorewaitError, LookupError):
    def __init__(self, tx_hash: str):
        super().__init__(f"transaction {tx_hash} not found")
        self.tx_hash = tx_hash


class TransactionFailedError(CorewaitError):
    def __init__(self, receipt: Receipt):
        super().__init__(f"transaction has failed: {receipt.post_state}")
        self.receipt = receipt


class TransactionTimeoutError(CorewaitError, TimeoutError):
    def __init__(self, tx_hash: str, timeout: timedelta):
        super().__init__("timeout exceed")
        self.tx_hash = tx_hash
        self.timeout = timeout
