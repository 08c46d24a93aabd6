"""Waiting for transaction receipts with an explicit deadline."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Union

from web3 import Web3
from web3.exceptions import TransactionNotFound

logger = logging.getLogger(__name__)


@dataclass
class Confirmed:
    tx_hash: str
    receipt: Any
    confirmations: int


@dataclass
class Reverted:
    tx_hash: str
    receipt: Any


@dataclass
class TimedOut:
    tx_hash: str
    timeout: float


ReceiptOutcome = Union[Confirmed, Reverted, TimedOut]


def _hex(tx_hash) -> str:
    if isinstance(tx_hash, (bytes, bytearray)):
        return Web3.to_hex(tx_hash)
    return str(tx_hash)


def wait_for_receipt(w3: Web3, tx_hash, timeout: float = 120, poll_interval: float = 1.0) -> ReceiptOutcome:
    """
    Poll for a receipt until it appears or ``timeout`` seconds pass.

    A missing receipt means the transaction is still pending. Any other
    client error propagates to the caller.
    """
    tx_hex = _hex(tx_hash)
    deadline = time.monotonic() + timeout

    while True:
        try:
            receipt = w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            receipt = None

        if receipt is not None:
            if receipt["status"] != 1:
                logger.warning("Transaction %s reverted in block %s", tx_hex, receipt["blockNumber"])
                return Reverted(tx_hex, receipt)
            confirmations = w3.eth.block_number - receipt["blockNumber"] + 1
            logger.debug("Transaction %s confirmed (%d confirmations)", tx_hex, confirmations)
            return Confirmed(tx_hex, receipt, confirmations)

        if time.monotonic() >= deadline:
            logger.warning("Timed out after %ss waiting for %s", timeout, tx_hex)
            return TimedOut(tx_hex, timeout)

        time.sleep(poll_interval)
