"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class RiskBand(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ActivityType(str, Enum):
    BORROW = "borrow"
    REPAY = "repay"
    LIMIT_INCREASE = "limit_increase"


@dataclass(frozen=True)
class TransactionRecord:
    """On-chain transfer from the block explorer"""

    hash: str
    from_address: str
    to_address: str
    value: float  # native currency units, not wei
    timestamp: int  # unix seconds
    block_number: int


@dataclass
class CashflowMetrics:
    """Trailing-window cashflow derived from transaction history"""

    total_inflow: float
    total_outflow: float
    net_cashflow: float
    transaction_count: int
    avg_transaction_size: float
    monthly_inflows: List[float]


@dataclass(frozen=True)
class CreditScore:
    """Output of the credit scorer"""

    score: int
    limit: float
    risk_band: RiskBand
    apr: float


@dataclass(frozen=True)
class ActivityEntry:
    """Single borrow/repay event in a wallet's credit history"""

    type: ActivityType
    amount: float
    date: str  # relative-time label fixed when the entry is recorded
    hash: str
    created_at: datetime
    apr: Optional[float] = None


@dataclass
class CreditState:
    """Per-wallet credit line state owned by the ledger"""

    address: str
    credit_limit: float
    used: float
    apr: float
    history: List[ActivityEntry] = field(default_factory=list)  # newest first

    @property
    def available(self) -> float:
        return self.credit_limit - self.used


@dataclass(frozen=True)
class CreditSummary:
    """Presentation view of a credit line"""

    credit_limit: float
    used: float
    available: float
    apr: float

    @property
    def utilization(self) -> float:
        if self.credit_limit <= 0:
            return 0.0
        return self.used / self.credit_limit


@dataclass(frozen=True)
class CreditProfile:
    """Fresh score combined with the ledger view after a refresh"""

    address: str
    score: CreditScore
    summary: CreditSummary
    fallback: bool = False  # score is the static default after a scoring error
