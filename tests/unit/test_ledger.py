"""Unit tests for credit ledger bookkeeping"""

from datetime import datetime, timezone

import pytest

from credit_gateway.domain.exceptions import InvalidAmountError
from credit_gateway.domain.ledger import CreditLedger
from credit_gateway.domain.models import ActivityType, CreditSummary
from tests.helpers import WALLET


def test_summary_unseen_address_uses_seed_state(ledger: CreditLedger):
    summary = ledger.summary(WALLET)

    assert summary == CreditSummary(credit_limit=500, used=50, available=450, apr=12.5)


def test_summary_is_idempotent(ledger: CreditLedger):
    ledger.record_borrow(WALLET, 25, "0xtx1", 12.5)

    assert ledger.summary(WALLET) == ledger.summary(WALLET)


def test_borrow_then_overpay_clamps_used_to_zero(ledger: CreditLedger):
    """Seed used=50: borrow 100 -> 150, repay 150 -> 0"""
    ledger.record_borrow(WALLET, 100, "tx1", 10)
    assert ledger.summary(WALLET).used == 150

    ledger.record_repayment(WALLET, 150, "tx2")
    assert ledger.summary(WALLET).used == 0

    ledger.record_repayment(WALLET, 10, "tx3")
    assert ledger.summary(WALLET).used == 0


def test_history_is_newest_first(ledger: CreditLedger):
    ledger.record_borrow(WALLET, 100, "tx1", 10)
    ledger.record_repayment(WALLET, 30, "tx2")

    history = ledger.get_transaction_history(WALLET)

    assert [entry.hash for entry in history] == ["tx2", "tx1"]
    assert history[0].type == ActivityType.REPAY
    assert history[1].type == ActivityType.BORROW


def test_borrow_entry_fields(ledger: CreditLedger):
    ledger.record_borrow(WALLET, 100, "tx1", 10)

    entry = ledger.get_transaction_history(WALLET)[0]

    assert entry.type == ActivityType.BORROW
    assert entry.date == "Just now"
    assert entry.amount == 100
    assert entry.hash == "tx1"
    assert entry.apr == 10


def test_borrow_without_apr_uses_current_apr(ledger: CreditLedger):
    ledger.apply_limit(WALLET, 1000, 8.5)
    entry = ledger.record_borrow(WALLET, 100, "tx1")

    assert entry.apr == 8.5


def test_history_for_unseen_address_is_empty(ledger: CreditLedger):
    assert ledger.get_transaction_history(WALLET) == []


def test_history_is_a_copy(ledger: CreditLedger):
    ledger.record_borrow(WALLET, 100, "tx1", 10)

    ledger.get_transaction_history(WALLET).clear()

    assert len(ledger.get_transaction_history(WALLET)) == 1


def test_apply_limit_below_used_keeps_used_and_floors_available(ledger: CreditLedger):
    ledger.record_borrow(WALLET, 350, "tx1", 12.5)  # used 400

    ledger.apply_limit(WALLET, 300, 9.0)
    summary = ledger.summary(WALLET)

    assert summary.used == 400
    assert summary.credit_limit == 300
    assert summary.apr == 9.0
    assert summary.available == 0


def test_apply_limit_does_not_touch_history(ledger: CreditLedger):
    ledger.apply_limit(WALLET, 2000, 8.5)

    assert ledger.get_transaction_history(WALLET) == []
    assert ledger.summary(WALLET).used == 50


def test_rescoring_does_not_reset_used(ledger: CreditLedger):
    ledger.apply_limit(WALLET, 1000, 8.5)
    ledger.record_borrow(WALLET, 200, "tx1", 8.5)

    ledger.apply_limit(WALLET, 1200, 12.5)

    assert ledger.summary(WALLET).used == 250
    assert ledger.summary(WALLET).available == 950


def test_borrow_is_not_limit_checked(ledger: CreditLedger):
    """Policy lives with the caller: the ledger records what it is told"""
    ledger.record_borrow(WALLET, 5000, "tx1", 12.5)

    summary = ledger.summary(WALLET)
    assert summary.used == 5050
    assert summary.available == 0


@pytest.mark.parametrize("amount", [0, -10])
def test_non_positive_amounts_rejected(ledger: CreditLedger, amount: float):
    with pytest.raises(InvalidAmountError):
        ledger.record_borrow(WALLET, amount, "tx1", 12.5)
    with pytest.raises(InvalidAmountError):
        ledger.record_repayment(WALLET, amount, "tx2")

    assert ledger.summary(WALLET).used == 50
    assert ledger.get_transaction_history(WALLET) == []


def test_addresses_are_case_insensitive(ledger: CreditLedger):
    ledger.record_borrow(WALLET.lower(), 100, "tx1", 12.5)

    assert ledger.summary(WALLET).used == 150
    assert len(ledger.get_transaction_history(WALLET.upper().replace("0X", "0x"))) == 1


def test_wallets_are_isolated(ledger: CreditLedger):
    other = "0x2222222222222222222222222222222222222222"
    ledger.record_borrow(WALLET, 100, "tx1", 12.5)

    assert ledger.summary(other).used == 50
    assert ledger.get_transaction_history(other) == []


def test_can_borrow(ledger: CreditLedger):
    assert ledger.can_borrow(WALLET, 450) is True
    assert ledger.can_borrow(WALLET, 450.01) is False
    assert ledger.can_borrow(WALLET, 0) is False


def test_can_borrow_rejects_when_over_limit(ledger: CreditLedger):
    ledger.record_borrow(WALLET, 350, "tx1", 12.5)
    ledger.apply_limit(WALLET, 300, 9.0)

    assert ledger.can_borrow(WALLET, 1) is False


def test_can_repay(ledger: CreditLedger):
    assert ledger.can_repay(WALLET, 50) is True
    assert ledger.can_repay(WALLET, 51) is False
    assert ledger.can_repay(WALLET, -1) is False


def test_entries_carry_record_time():
    fixed = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
    ledger = CreditLedger(clock=lambda: fixed)

    entry = ledger.record_repayment(WALLET, 10, "tx1")

    assert entry.created_at == fixed
    assert entry.date == "Just now"
    assert entry.apr is None


def test_utilization(ledger: CreditLedger):
    ledger.apply_limit(WALLET, 200, 12.5)

    assert ledger.summary(WALLET).utilization == 0.25


def test_address_locks_are_not_retained():
    ledger = CreditLedger()
    for i in range(5):
        ledger.record_borrow(f"0x{i:040x}", 1, f"tx{i}")

    assert len(ledger._locks) == 0
