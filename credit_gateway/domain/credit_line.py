"""Credit line flows - scoring refresh and submit-then-record borrow/repay"""

import asyncio
import logging
import weakref
from typing import Any, Dict, List, Optional, Protocol

from credit_gateway.config import Settings, settings as default_settings
from credit_gateway.domain.activity import vault_activity_from_transactions
from credit_gateway.domain.exceptions import (
    ExcessRepaymentError,
    HistoryFetchError,
    InsufficientCreditError,
    InvalidAmountError,
    InvalidTransactionDataError,
)
from credit_gateway.domain.ledger import CreditLedger
from credit_gateway.domain.models import ActivityEntry, CreditProfile, CreditSummary
from credit_gateway.domain.scoring import CreditScorer, TransactionHistoryProvider
from credit_gateway.utils.date_utils import utc_now


class TransactionSubmitter(Protocol):
    async def submit(self, to_address: str, value: int, chain_metadata: Dict[str, Any]) -> str:
        ...


class CreditLineService:
    """
    Caller of the ledger: enforces borrow/repay policy and ordering.

    Flow for borrow and repay:
    1. Validate amount against the ledger's current summary
    2. Submit the vault transfer
    3. Record in the ledger only once the transfer has a hash

    Steps 1-3 run under a per-wallet asyncio lock, so a second request for
    the same wallet is validated against the first one's recorded result.
    A submission failure propagates and the ledger is not touched.
    """

    def __init__(
        self,
        scorer: CreditScorer,
        ledger: CreditLedger,
        submitter: TransactionSubmitter,
        provider: Optional[TransactionHistoryProvider] = None,
        config: Settings | None = None,
    ):
        self.scorer = scorer
        self.ledger = ledger
        self.submitter = submitter
        self.provider = provider or scorer.provider
        self.config = config or default_settings
        # Entries disappear once no request holds the lock
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, address: str) -> asyncio.Lock:
        return self._locks.setdefault(address.lower(), asyncio.Lock())

    def _chain_metadata(self) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {"chainId": self.config.chain_id}
        if self.config.signer_from_address:
            metadata["from"] = self.config.signer_from_address
        return metadata

    async def _submit_vault_transfer(self) -> str:
        return await self.submitter.submit(
            self.config.credit_vault_address,
            self.config.vault_transfer_value_wei,
            self._chain_metadata(),
        )

    async def refresh(self, address: str) -> CreditProfile:
        """Re-score the wallet and push the new limit/APR into the ledger"""
        outcome = await self.scorer.evaluate(address)
        credit_score = self.scorer.resolve(address, outcome)
        self.ledger.apply_limit(address, credit_score.limit, credit_score.apr)
        return CreditProfile(
            address=address,
            score=credit_score,
            summary=self.ledger.summary(address),
            fallback=not outcome.ok,
        )

    def summary(self, address: str) -> CreditSummary:
        return self.ledger.summary(address)

    def history(self, address: str) -> List[ActivityEntry]:
        return self.ledger.get_transaction_history(address)

    async def borrow(self, address: str, amount: float) -> str:
        if amount <= 0:
            raise InvalidAmountError("Invalid amount")

        lock = self._lock_for(address)
        async with lock:
            if not self.ledger.can_borrow(address, amount):
                raise InsufficientCreditError("Amount exceeds available credit")

            apr = self.ledger.summary(address).apr
            logging.info("Borrowing", extra={"address": address, "step": "borrow_submit", "amount": amount})
            tx_hash = await self._submit_vault_transfer()

            self.ledger.record_borrow(address, amount, tx_hash, apr)
        return tx_hash

    async def repay(self, address: str, amount: float) -> str:
        if amount <= 0:
            raise InvalidAmountError("Invalid amount")

        lock = self._lock_for(address)
        async with lock:
            if not self.ledger.can_repay(address, amount):
                raise ExcessRepaymentError("Amount exceeds debt")

            logging.info("Repaying", extra={"address": address, "step": "repay_submit", "amount": amount})
            tx_hash = await self._submit_vault_transfer()

            self.ledger.record_repayment(address, amount, tx_hash)
        return tx_hash

    async def credit_data(self, address: str) -> Dict[str, float]:
        """Compact score/limit/borrowed view for agent integrations"""
        credit_score = await self.scorer.score(address)
        return {
            "score": credit_score.score,
            "limit": credit_score.limit,
            "borrowed": self.ledger.summary(address).used,
        }

    async def vault_activity(self, address: str) -> List[ActivityEntry]:
        """On-chain transfers from the wallet into the credit vault"""
        try:
            transactions = await self.provider.fetch(address, page_size=self.config.history_page_size)
        except (HistoryFetchError, InvalidTransactionDataError) as e:
            logging.warning(f"Error fetching credit history: {e}", extra={"address": address})
            return []

        return vault_activity_from_transactions(
            transactions,
            self.config.credit_vault_address,
            self.config.currency_rate,
            utc_now(),
        )
