"""Shared test doubles and transaction factories"""

import asyncio
from typing import Any, Dict, List

from credit_gateway.domain.exceptions import TransactionSubmissionError
from credit_gateway.domain.models import TransactionRecord

WALLET = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"
COUNTERPARTY = "0x1111111111111111111111111111111111111111"
NOW = 1_760_000_000.0


def make_txn(
    value: float,
    inflow: bool = True,
    age_days: float = 1,
    wallet: str = WALLET,
    counterparty: str = COUNTERPARTY,
    tx_hash: str = "0xhash",
) -> TransactionRecord:
    """Transfer into (or out of) `wallet`, `age_days` before NOW"""
    return TransactionRecord(
        hash=tx_hash,
        from_address=counterparty if inflow else wallet,
        to_address=wallet if inflow else counterparty,
        value=value,
        timestamp=int(NOW - age_days * 86400),
        block_number=1000,
    )


class StaticHistoryProvider:
    """History provider returning a fixed list, or raising a configured error"""

    def __init__(self, transactions: List[TransactionRecord] | None = None, error: Exception | None = None):
        self.transactions = transactions or []
        self.error = error
        self.calls: List[str] = []

    async def fetch(self, address: str, page_size: int = 50) -> List[TransactionRecord]:
        self.calls.append(address)
        if self.error is not None:
            raise self.error
        return self.transactions[:page_size]


class RecordingSubmitter:
    """Submitter that records transfers and returns sequential hashes"""

    def __init__(self, fail: bool = False, delay: float = 0.0):
        self.fail = fail
        self.delay = delay
        self.submitted: List[Dict[str, Any]] = []

    async def submit(self, to_address: str, value: int, chain_metadata: Dict[str, Any]) -> str:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise TransactionSubmissionError("Signing relay error: 503")
        self.submitted.append({"to": to_address, "value": value, **chain_metadata})
        return f"0xtx{len(self.submitted)}"
