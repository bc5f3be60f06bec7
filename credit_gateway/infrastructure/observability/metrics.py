"""Prometheus metrics for monitoring scores, credit limits, ledger activity and chain calls"""

from prometheus_client import Counter, Histogram

# Scoring metrics
credit_score_counter = Counter(
    "credit_score_total",
    "Credit scores computed",
    ["risk_band"],  # Low | Medium | High
)

credit_limit_bucket_counter = Counter(
    "credit_limit_bucket",
    "Credit limits issued by bucket",
    ["bucket"],  # floor, $100-$500, $500-$2000, $2000+
)

scoring_fallback_counter = Counter(
    "scoring_fallbacks_total",
    "Refreshes that fell back to the default score",
)

# Explorer metrics
history_fetch_failures_counter = Counter(
    "history_fetch_failures_total",
    "Failed block explorer calls",
)

# Ledger metrics
ledger_operation_counter = Counter(
    "ledger_operations_total",
    "Ledger mutations recorded",
    ["operation"],  # borrow | repay
)

credit_policy_rejection_counter = Counter(
    "credit_policy_rejections_total",
    "Borrow/repay requests rejected before submission",
    ["reason"],
)

# Signing relay metrics
submission_latency_histogram = Histogram(
    "transaction_submission_latency_seconds",
    "Signing relay response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

submission_failure_counter = Counter(
    "transaction_submission_failures_total",
    "Failed transaction submissions",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_credit_score(risk_band: str, credit_limit: float) -> None:
    """Record score metrics for monitoring band mix and limit distribution"""
    credit_score_counter.labels(risk_band=risk_band).inc()

    if credit_limit <= 100:
        bucket = "floor"
    elif credit_limit <= 500:
        bucket = "$100-$500"
    elif credit_limit <= 2000:
        bucket = "$500-$2000"
    else:
        bucket = "$2000+"

    credit_limit_bucket_counter.labels(bucket=bucket).inc()
