"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class AmountRequest(BaseModel):
    """Request body for POST /v1/credit/{address}/borrow and /repay"""

    amount: float = Field(..., gt=0, description="Amount in USDT")


class CreditSummaryResponse(BaseModel):
    """Response for GET /v1/credit/{address}"""

    address: str
    credit_limit: float
    used: float
    available: float
    apr: float
    utilization: float


class CreditProfileResponse(CreditSummaryResponse):
    """Response for POST /v1/credit/{address}/refresh"""

    score: int
    risk_band: str


class TransactionResponse(BaseModel):
    """Response for borrow/repay"""

    tx_hash: str
    summary: CreditSummaryResponse


class ActivitySchema(BaseModel):
    """Single entry in credit history"""

    type: str
    amount: float
    date: str
    hash: str
    created_at: datetime
    apr: Optional[float] = None


class HistoryResponse(BaseModel):
    """Response for GET /v1/credit/{address}/history"""

    address: str
    activities: List[ActivitySchema]
