"""Prometheus metrics for settlement volume, review outcomes and cash discrepancies"""

from prometheus_client import Counter, Histogram

# Settlement metrics
settlement_counter = Counter(
    "kasa_settlement_total",
    "Settlements saved or submitted",
    ["kind", "status"],  # draft | submitted | revised
)

review_counter = Counter(
    "kasa_settlement_review_total",
    "Settlement review decisions",
    ["kind", "action"],  # approve | reject | revise
)

duplicate_submission_counter = Counter(
    "kasa_duplicate_submission_total",
    "Submissions refused because an active record already exists",
    ["kind"],
)

discrepancy_counter = Counter(
    "kasa_settlement_discrepancy_total",
    "Submitted settlements whose difference is not zero",
    ["kind", "direction"],  # over | short
)

# Progress payment metrics
report_rows_histogram = Histogram(
    "kasa_hakedis_report_rows",
    "Report rows written per progress payment",
    buckets=[0, 1, 5, 10, 25, 50, 100, 250],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_settlement(kind: str, status: str, difference: float) -> None:
    """Record a settlement write and whether its figures balanced"""
    settlement_counter.labels(kind=kind, status=status).inc()

    if difference > 0:
        discrepancy_counter.labels(kind=kind, direction="over").inc()
    elif difference < 0:
        discrepancy_counter.labels(kind=kind, direction="short").inc()
