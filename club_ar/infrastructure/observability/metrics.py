"""Prometheus metrics for monitoring settlement previews, rejections and credit issued"""

from prometheus_client import Counter, Histogram

# Settlement metrics
settlement_counter = Counter(
    "club_ar_settlement_total",
    "Total settlement previews computed",
    ["strategy", "transition"],  # manual | fifo | full; reinstatement | still-suspended | no-change
)

allocation_rejection_counter = Counter(
    "club_ar_allocation_rejections_total",
    "Settlement previews rejected as invalid",
    ["error"],  # over_allocation | funds_exceeded | insufficient_funds | ...
)

credit_issued_counter = Counter(
    "club_ar_credit_issued_bucket",
    "Settlements that left surplus credit, by size",
    ["bucket"],  # 0 | 1-1000 | 1000-10000 | 10000+ (major units)
)

# Aging metrics
status_evaluation_counter = Counter(
    "club_ar_status_evaluations_total",
    "Account status evaluations",
    ["status", "override"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_settlement(strategy: str, transition: str, credit_to_add_cents: int) -> None:
    """Record settlement metrics for monitoring strategy usage and reinstatements"""
    settlement_counter.labels(strategy=strategy, transition=transition).inc()

    # Bucket credit amounts for distribution analysis
    if credit_to_add_cents == 0:
        bucket = "0"
    elif credit_to_add_cents <= 100_000:
        bucket = "1-1000"
    elif credit_to_add_cents <= 1_000_000:
        bucket = "1000-10000"
    else:
        bucket = "10000+"

    credit_issued_counter.labels(bucket=bucket).inc()


def record_rejection(error_code: str) -> None:
    allocation_rejection_counter.labels(error=error_code).inc()


def record_status_evaluation(status: str, override_active: bool) -> None:
    status_evaluation_counter.labels(status=status, override="active" if override_active else "none").inc()
