"""Data access layer for credit state"""

from typing import Callable, Optional

from sqlalchemy.orm import Session

from credit_gateway.domain.models import ActivityEntry, ActivityType, CreditState
from credit_gateway.infrastructure.database.models import CreditActivityRecord, CreditStateRecord


class SqlCreditStateStore:
    """CreditStateStore backed by the credit_state / credit_activity tables"""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def load(self, address: str) -> Optional[CreditState]:
        """Fetch state with activity newest first"""
        with self.session_factory() as db:
            record = db.get(CreditStateRecord, address)
            if record is None:
                return None

            return CreditState(
                address=record.address,
                credit_limit=record.credit_limit,
                used=record.used,
                apr=record.apr,
                history=[
                    ActivityEntry(
                        type=ActivityType(a.type),
                        amount=a.amount,
                        date=a.date_label,
                        hash=a.tx_hash,
                        created_at=a.created_at,
                        apr=a.apr,
                    )
                    for a in record.activities
                ],
            )

    def save(self, state: CreditState) -> None:
        """Upsert the state row and insert entries not yet persisted"""
        with self.session_factory() as db:
            record = db.get(CreditStateRecord, state.address)
            if record is None:
                record = CreditStateRecord(address=state.address)
                db.add(record)

            record.credit_limit = state.credit_limit
            record.used = state.used
            record.apr = state.apr

            persisted = (
                db.query(CreditActivityRecord)
                .filter(CreditActivityRecord.address == state.address)
                .count()
            )

            # History is newest first and append-only, so unsaved entries lead the list
            new_entries = state.history[: len(state.history) - persisted]
            for entry in reversed(new_entries):
                db.add(
                    CreditActivityRecord(
                        address=state.address,
                        type=entry.type.value,
                        amount=entry.amount,
                        date_label=entry.date,
                        tx_hash=entry.hash,
                        apr=entry.apr,
                        created_at=entry.created_at,
                    )
                )

            db.commit()
