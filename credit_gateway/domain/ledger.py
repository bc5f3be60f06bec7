"""Credit ledger - per-wallet utilization bookkeeping for borrow/repay"""

import logging
import threading
import weakref
from datetime import datetime
from typing import Callable, Dict, List, Optional, Protocol

from credit_gateway.config import Settings, settings as default_settings
from credit_gateway.domain.exceptions import InvalidAmountError
from credit_gateway.domain.models import ActivityEntry, ActivityType, CreditState, CreditSummary
from credit_gateway.utils.date_utils import relative_time_label, utc_now


class CreditStateStore(Protocol):
    """Persistence boundary for credit state, keyed by normalised address"""

    def load(self, address: str) -> Optional[CreditState]:
        ...

    def save(self, state: CreditState) -> None:
        ...


class InMemoryCreditStateStore:
    """Process-lifetime store; state is lost on restart"""

    def __init__(self):
        self._states: Dict[str, CreditState] = {}

    def load(self, address: str) -> Optional[CreditState]:
        return self._states.get(address)

    def save(self, state: CreditState) -> None:
        self._states[state.address] = state


class CreditLedger:
    """
    Owns every wallet's CreditState.

    The ledger is bookkeeping only: it does not check that a borrow fits
    in the available credit or that a repayment is covered by the debt.
    Callers validate with can_borrow / can_repay before submitting the
    on-chain transfer, and record here only after the transfer succeeds.
    """

    def __init__(
        self,
        store: CreditStateStore | None = None,
        config: Settings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store if store is not None else InMemoryCreditStateStore()
        self.config = config or default_settings
        self.clock = clock
        # Entries disappear once no caller holds the lock
        self._locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    @staticmethod
    def _key(address: str) -> str:
        return address.lower()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(key, threading.Lock())

    def _new_state(self, key: str) -> CreditState:
        # Seeded with a small outstanding balance for demo wallets
        return CreditState(
            address=key,
            credit_limit=self.config.default_credit_limit,
            used=self.config.default_used,
            apr=self.config.default_apr,
        )

    def _load_or_create(self, key: str) -> CreditState:
        state = self.store.load(key)
        return state if state is not None else self._new_state(key)

    def _append(self, state: CreditState, entry_type: ActivityType, amount: float, tx_hash: str,
                apr: Optional[float] = None) -> ActivityEntry:
        created_at = self.clock()
        entry = ActivityEntry(
            type=entry_type,
            amount=amount,
            date=relative_time_label(created_at, created_at),
            hash=tx_hash,
            created_at=created_at,
            apr=apr,
        )
        state.history.insert(0, entry)
        return entry

    def apply_limit(self, address: str, new_limit: float, new_apr: float) -> None:
        """Overwrite limit and APR from a scoring refresh; `used` is left as is"""
        key = self._key(address)
        with self._lock_for(key):
            state = self._load_or_create(key)
            state.credit_limit = new_limit
            state.apr = new_apr
            self.store.save(state)

        if state.used > new_limit:
            logging.warning(
                "Credit limit below outstanding balance",
                extra={"address": key, "credit_limit": new_limit, "used": state.used},
            )

    def summary(self, address: str) -> CreditSummary:
        key = self._key(address)
        with self._lock_for(key):
            state = self._load_or_create(key)

        return CreditSummary(
            credit_limit=state.credit_limit,
            used=state.used,
            available=max(state.available, 0),
            apr=state.apr,
        )

    def record_borrow(self, address: str, amount: float, tx_hash: str, apr: Optional[float] = None) -> ActivityEntry:
        """
        Record a completed borrow.

        Precondition: amount > 0. The available-credit check is the
        caller's; `used` may exceed the limit if it is skipped.
        """
        if amount <= 0:
            raise InvalidAmountError(f"Borrow amount must be positive, got {amount}")

        key = self._key(address)
        with self._lock_for(key):
            state = self._load_or_create(key)
            state.used += amount
            entry = self._append(state, ActivityType.BORROW, amount, tx_hash, apr if apr is not None else state.apr)
            self.store.save(state)

        logging.info(
            "Borrow recorded",
            extra={"address": key, "step": "borrow_recorded", "amount": amount, "tx_hash": tx_hash, "used": state.used},
        )
        return entry

    def record_repayment(self, address: str, amount: float, tx_hash: str) -> ActivityEntry:
        """Record a completed repayment; overpayment floors `used` at 0"""
        if amount <= 0:
            raise InvalidAmountError(f"Repayment amount must be positive, got {amount}")

        key = self._key(address)
        with self._lock_for(key):
            state = self._load_or_create(key)
            state.used = max(0, state.used - amount)
            entry = self._append(state, ActivityType.REPAY, amount, tx_hash)
            self.store.save(state)

        logging.info(
            "Repayment recorded",
            extra={"address": key, "step": "repay_recorded", "amount": amount, "tx_hash": tx_hash, "used": state.used},
        )
        return entry

    def get_transaction_history(self, address: str) -> List[ActivityEntry]:
        """Activity newest first; empty for a wallet the ledger has never seen"""
        state = self.store.load(self._key(address))
        if state is None:
            return []
        return list(state.history)

    def can_borrow(self, address: str, amount: float) -> bool:
        return 0 < amount <= self.summary(address).available

    def can_repay(self, address: str, amount: float) -> bool:
        return 0 < amount <= self.summary(address).used
