"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache

from fastapi import Request

from credit_gateway.config import settings
from credit_gateway.domain.credit_line import CreditLineService
from credit_gateway.domain.ledger import CreditLedger, CreditStateStore, InMemoryCreditStateStore
from credit_gateway.domain.scoring import CreditScorer
from credit_gateway.infrastructure.clients.explorer import ExplorerClient
from credit_gateway.infrastructure.clients.submitter import RelayTransactionSubmitter


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def build_credit_state_store() -> CreditStateStore:
    """In-memory by default; `LEDGER_BACKEND=sql` persists via SQLAlchemy"""
    if settings.ledger_backend == "sql":
        from credit_gateway.infrastructure.database.repositories import SqlCreditStateStore
        from credit_gateway.infrastructure.database.session import get_session_factory

        return SqlCreditStateStore(get_session_factory())
    return InMemoryCreditStateStore()


@lru_cache
def get_credit_line_service() -> CreditLineService:
    """Process-wide service graph; the ledger must outlive single requests"""
    provider = ExplorerClient()
    return CreditLineService(
        scorer=CreditScorer(provider),
        ledger=CreditLedger(store=build_credit_state_store()),
        submitter=RelayTransactionSubmitter(),
        provider=provider,
    )
