"""Credit activity reconstructed from on-chain transfers to the credit vault"""

from datetime import datetime, timezone
from typing import List

from credit_gateway.domain.models import ActivityEntry, ActivityType, TransactionRecord
from credit_gateway.utils.date_utils import relative_time_label


def vault_activity_from_transactions(
    transactions: List[TransactionRecord],
    vault_address: str,
    currency_rate: float,
    now: datetime,
    limit: int = 10,
) -> List[ActivityEntry]:
    """
    Map transfers sent to the vault into borrow entries.

    Every transfer into the vault is treated as a borrow; repayments would
    originate from the vault and are not visible in the wallet's sent list.
    Amounts are converted to the quote currency at `currency_rate`.
    """
    vault = vault_address.lower()
    vault_txns = [t for t in transactions if t.to_address.lower() == vault]

    entries = []
    for txn in vault_txns[:limit]:
        created_at = datetime.fromtimestamp(txn.timestamp, tz=timezone.utc)
        entries.append(
            ActivityEntry(
                type=ActivityType.BORROW,
                amount=txn.value * currency_rate,
                date=relative_time_label(created_at, now),
                hash=txn.hash,
                created_at=created_at,
            )
        )
    return entries
