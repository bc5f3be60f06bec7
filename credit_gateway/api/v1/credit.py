"""/v1/credit/{address} - credit line refresh, borrow, repay and history endpoints"""

import logging
import time
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Request

from credit_gateway.api.dependencies import get_credit_line_service, get_request_id
from credit_gateway.api.v1.schemas import (
    ActivitySchema,
    AmountRequest,
    CreditProfileResponse,
    CreditSummaryResponse,
    HistoryResponse,
    TransactionResponse,
)
from credit_gateway.domain.credit_line import CreditLineService
from credit_gateway.domain.exceptions import CreditPolicyError, TransactionSubmissionError
from credit_gateway.domain.models import ActivityEntry, CreditSummary
from credit_gateway.infrastructure.observability.logging import log_refresh
from credit_gateway.infrastructure.observability.metrics import (
    credit_policy_rejection_counter,
    ledger_operation_counter,
    record_credit_score,
    scoring_fallback_counter,
)

router = APIRouter()

WalletAddress = Annotated[str, Path(pattern=r"^0x[0-9a-fA-F]{40}$", description="Wallet address")]


def _summary_response(address: str, summary: CreditSummary) -> CreditSummaryResponse:
    return CreditSummaryResponse(
        address=address,
        credit_limit=summary.credit_limit,
        used=summary.used,
        available=summary.available,
        apr=summary.apr,
        utilization=summary.utilization,
    )


def _activity_schema(entry: ActivityEntry) -> ActivitySchema:
    return ActivitySchema(
        type=entry.type.value,
        amount=entry.amount,
        date=entry.date,
        hash=entry.hash,
        created_at=entry.created_at,
        apr=entry.apr,
    )


@router.post("/credit/{address}/refresh", response_model=CreditProfileResponse)
async def refresh_credit(
    request: Request,
    address: WalletAddress,
    service: CreditLineService = Depends(get_credit_line_service),
):
    """
    Re-score the wallet from on-chain cashflow and update its credit line.

    Scoring never fails: explorer outages fall back to an empty history
    or to the default score.
    """
    start_time = time.time()
    profile = await service.refresh(address)

    duration_ms = (time.time() - start_time) * 1000
    record_credit_score(profile.score.risk_band.value, profile.score.limit)
    if profile.fallback:
        scoring_fallback_counter.inc()
    log_refresh(
        get_request_id(request),
        address,
        profile.score.score,
        profile.score.risk_band.value,
        profile.score.limit,
        duration_ms,
    )

    return CreditProfileResponse(
        **_summary_response(address, profile.summary).model_dump(),
        score=profile.score.score,
        risk_band=profile.score.risk_band.value,
    )


@router.get("/credit/{address}", response_model=CreditSummaryResponse)
def get_credit_summary(
    address: WalletAddress,
    service: CreditLineService = Depends(get_credit_line_service),
):
    """Current limit, utilization and APR without re-scoring"""
    return _summary_response(address, service.summary(address))


@router.post("/credit/{address}/borrow", response_model=TransactionResponse)
async def borrow(
    request_body: AmountRequest,
    request: Request,
    address: WalletAddress,
    service: CreditLineService = Depends(get_credit_line_service),
):
    """Draw on the credit line; recorded only after the vault transfer is broadcast"""
    request_id = get_request_id(request)

    try:
        tx_hash = await service.borrow(address, request_body.amount)
    except CreditPolicyError as e:
        credit_policy_rejection_counter.labels(reason=type(e).__name__).inc()
        logging.warning(f"Borrow rejected: {e}", extra={"request_id": request_id, "address": address})
        raise HTTPException(status_code=422, detail=str(e))
    except TransactionSubmissionError as e:
        logging.error(f"Borrow submission failed: {e}", extra={"request_id": request_id, "address": address})
        raise HTTPException(status_code=502, detail="Transaction submission failed")

    ledger_operation_counter.labels(operation="borrow").inc()
    return TransactionResponse(tx_hash=tx_hash, summary=_summary_response(address, service.summary(address)))


@router.post("/credit/{address}/repay", response_model=TransactionResponse)
async def repay(
    request_body: AmountRequest,
    request: Request,
    address: WalletAddress,
    service: CreditLineService = Depends(get_credit_line_service),
):
    """Pay down outstanding debt; recorded only after the vault transfer is broadcast"""
    request_id = get_request_id(request)

    try:
        tx_hash = await service.repay(address, request_body.amount)
    except CreditPolicyError as e:
        credit_policy_rejection_counter.labels(reason=type(e).__name__).inc()
        logging.warning(f"Repay rejected: {e}", extra={"request_id": request_id, "address": address})
        raise HTTPException(status_code=422, detail=str(e))
    except TransactionSubmissionError as e:
        logging.error(f"Repay submission failed: {e}", extra={"request_id": request_id, "address": address})
        raise HTTPException(status_code=502, detail="Transaction submission failed")

    ledger_operation_counter.labels(operation="repay").inc()
    return TransactionResponse(tx_hash=tx_hash, summary=_summary_response(address, service.summary(address)))


@router.get("/credit/{address}/history", response_model=HistoryResponse)
def get_credit_history(
    address: WalletAddress,
    service: CreditLineService = Depends(get_credit_line_service),
):
    """Borrow/repay entries recorded by the ledger, newest first"""
    activities = [_activity_schema(entry) for entry in service.history(address)]
    return HistoryResponse(address=address, activities=activities)


@router.get("/credit/{address}/vault-activity", response_model=HistoryResponse)
async def get_vault_activity(
    address: WalletAddress,
    service: CreditLineService = Depends(get_credit_line_service),
):
    """Last 10 on-chain transfers from the wallet into the credit vault"""
    activities = [_activity_schema(entry) for entry in await service.vault_activity(address)]
    return HistoryResponse(address=address, activities=activities)
