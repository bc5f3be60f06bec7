"""Credit scoring engine - derives a credit line from on-chain cashflow"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from credit_gateway.config import Settings, settings as default_settings
from credit_gateway.domain.exceptions import HistoryFetchError
from credit_gateway.domain.models import CashflowMetrics, CreditScore, RiskBand, TransactionRecord

DEFAULT_CREDIT_SCORE = CreditScore(score=50, limit=500, risk_band=RiskBand.MEDIUM, apr=12.5)

SECONDS_PER_DAY = 24 * 60 * 60


class TransactionHistoryProvider(Protocol):
    async def fetch(self, address: str, page_size: int = 50) -> List[TransactionRecord]:
        ...


@dataclass(frozen=True)
class ScoringOutcome:
    """Either a computed score or the error that prevented it"""

    value: Optional[CreditScore] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def round_half_up(value: float) -> int:
    """Round to nearest integer with .5 going up (towards +inf)"""
    return math.floor(value + 0.5)


def calculate_cashflow(
    transactions: List[TransactionRecord],
    address: str,
    now: float,
    window_days: int = 30,
) -> CashflowMetrics:
    """
    Aggregate inflow/outflow for `address` over the trailing window.

    Recipient is checked before sender, so a self-transfer is counted
    once, as inflow. Address matching is case-insensitive.
    """
    window_start = now - window_days * SECONDS_PER_DAY
    wallet = address.lower()

    total_inflow = 0.0
    total_outflow = 0.0
    transaction_count = 0
    monthly_inflows: List[float] = []

    for txn in transactions:
        if txn.timestamp < window_start:
            continue
        transaction_count += 1

        if txn.to_address.lower() == wallet:
            total_inflow += txn.value
            monthly_inflows.append(txn.value)
        elif txn.from_address.lower() == wallet:
            total_outflow += txn.value

    avg_size = (total_inflow + total_outflow) / transaction_count if transaction_count > 0 else 0.0

    return CashflowMetrics(
        total_inflow=total_inflow,
        total_outflow=total_outflow,
        net_cashflow=total_inflow - total_outflow,
        transaction_count=transaction_count,
        avg_transaction_size=avg_size,
        monthly_inflows=monthly_inflows,
    )


def calculate_score(cashflow: CashflowMetrics) -> int:
    """
    Sum of four capped contributions, rounded and clamped to [0, 100].

    - Activity:    2 points per transaction, max 30
    - Net flow:    10 points per unit of positive net cashflow, max 30
    - Inflow:      5 points per unit of inflow, max 25
    - Consistency: inflow count / 30 * 15

    The consistency term has no cap of its own and exceeds 15 once a
    wallet has more than 30 inflows in the window.
    """
    score = 0.0
    score += min(cashflow.transaction_count * 2, 30)

    if cashflow.net_cashflow > 0:
        score += min(cashflow.net_cashflow * 10, 30)

    score += min(cashflow.total_inflow * 5, 25)

    if cashflow.monthly_inflows:
        score += (len(cashflow.monthly_inflows) / 30) * 15

    return max(0, min(round_half_up(score), 100))


def median_inflow(inflows: List[float]) -> float:
    """Upper median: element at n // 2 of the sorted list, no averaging"""
    if not inflows:
        return 0.0
    return sorted(inflows)[len(inflows) // 2]


def inflow_volatility(inflows: List[float]) -> float:
    """Population standard deviation; 0 for an empty list"""
    n = len(inflows) or 1
    mean = sum(inflows) / n
    variance = sum((v - mean) ** 2 for v in inflows) / n
    return math.sqrt(variance)


def determine_credit_limit(cashflow: CashflowMetrics, config: Settings = default_settings) -> int:
    """
    Limit = clamp(alpha * median * rate - beta * volatility * rate, floor, cap)

    Median inflow sizes the line; volatility of inflows penalises it.
    """
    median = median_inflow(cashflow.monthly_inflows)
    volatility = inflow_volatility(cashflow.monthly_inflows)
    rate = config.currency_rate

    base_limit = (config.limit_alpha * median * rate) - (config.limit_beta * volatility * rate)
    limit = round_half_up(base_limit)

    return int(max(config.limit_floor, min(limit, config.limit_cap)))


def determine_risk_band(score: int) -> tuple[RiskBand, float]:
    """
    Map score to risk band and APR.

    - 70+:   Low    8.5%
    - 40-69: Medium 12.5%
    - <40:   High   18.5%
    """
    if score >= 70:
        return RiskBand.LOW, 8.5
    elif score >= 40:
        return RiskBand.MEDIUM, 12.5
    else:
        return RiskBand.HIGH, 18.5


def make_credit_score(
    transactions: List[TransactionRecord],
    address: str,
    now: float,
    config: Settings = default_settings,
) -> CreditScore:
    """Pure scoring pipeline: cashflow -> score -> limit -> band"""
    cashflow = calculate_cashflow(transactions, address, now, config.scoring_window_days)
    score = calculate_score(cashflow)
    limit = determine_credit_limit(cashflow, config)
    risk_band, apr = determine_risk_band(score)

    return CreditScore(score=score, limit=limit, risk_band=risk_band, apr=apr)


class CreditScorer:
    """Scores wallets from their transaction history; never raises"""

    def __init__(
        self,
        provider: TransactionHistoryProvider,
        config: Settings | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.provider = provider
        self.config = config or default_settings
        self.clock = clock

    async def _fetch_history(self, address: str) -> List[TransactionRecord]:
        try:
            return await self.provider.fetch(address, page_size=self.config.history_page_size)
        except HistoryFetchError as e:
            logging.warning(
                f"History fetch failed, scoring with empty history: {e}",
                extra={"address": address, "step": "history_fetch"},
            )
            return []

    async def evaluate(self, address: str) -> ScoringOutcome:
        """Score `address`, capturing any failure in the outcome"""
        try:
            transactions = await self._fetch_history(address)
            credit_score = make_credit_score(transactions, address, self.clock(), self.config)
        except Exception as e:
            return ScoringOutcome(error=e)
        return ScoringOutcome(value=credit_score)

    def resolve(self, address: str, outcome: ScoringOutcome) -> CreditScore:
        """Computed score, or the default when `outcome` carries an error"""
        if not outcome.ok:
            logging.error(
                f"Error calculating credit score: {outcome.error}",
                extra={"address": address, "step": "score_fallback"},
            )
            return DEFAULT_CREDIT_SCORE

        logging.info(
            "Credit score calculated",
            extra={
                "address": address,
                "step": "score_complete",
                "score": outcome.value.score,
                "credit_limit": outcome.value.limit,
                "risk_band": outcome.value.risk_band.value,
            },
        )
        return outcome.value

    async def score(self, address: str) -> CreditScore:
        return self.resolve(address, await self.evaluate(address))
