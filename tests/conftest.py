"""Pytest fixtures for testing"""

import pytest
from fastapi.testclient import TestClient

from credit_gateway.api.dependencies import get_credit_line_service
from credit_gateway.api.main import create_app
from credit_gateway.domain.credit_line import CreditLineService
from credit_gateway.domain.ledger import CreditLedger
from credit_gateway.domain.scoring import CreditScorer
from credit_gateway.infrastructure.database.session import build_engine, build_session_factory
from tests.helpers import NOW, RecordingSubmitter, StaticHistoryProvider


@pytest.fixture
def provider() -> StaticHistoryProvider:
    return StaticHistoryProvider()


@pytest.fixture
def submitter() -> RecordingSubmitter:
    return RecordingSubmitter()


@pytest.fixture
def ledger() -> CreditLedger:
    return CreditLedger()


@pytest.fixture
def scorer(provider: StaticHistoryProvider) -> CreditScorer:
    return CreditScorer(provider, clock=lambda: NOW)


@pytest.fixture
def service(scorer: CreditScorer, ledger: CreditLedger, submitter: RecordingSubmitter) -> CreditLineService:
    return CreditLineService(scorer=scorer, ledger=ledger, submitter=submitter)


@pytest.fixture
def client(service: CreditLineService) -> TestClient:
    """FastAPI test client wired to in-memory collaborators"""
    app = create_app()
    app.dependency_overrides[get_credit_line_service] = lambda: service
    return TestClient(app)


@pytest.fixture
def session_factory(tmp_path):
    """SQLite-backed session factory with tables created"""
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    yield build_session_factory(engine)
    engine.dispose()
