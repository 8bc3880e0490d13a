"""Prometheus metrics for ledger activity, gold price lookups and webhook performance"""

from prometheus_client import Counter, Histogram

# Ledger metrics
ledger_operation_counter = Counter(
    "gold_ledger_operations_total",
    "Ledger operations applied to debts",
    ["operation", "unit"],  # open | payment | increase | toggle ; CASH | GOLD
)

unallocated_payment_counter = Counter(
    "gold_ledger_unallocated_payments_total",
    "Payments that exceeded the outstanding balance",
    ["unit"],
)

# Gold price metrics
gold_price_fetch_failures_counter = Counter(
    "gold_price_fetch_failures_total",
    "Failed gold price API calls",
)

gold_price_cache_hits_counter = Counter(
    "gold_price_cache_hits_total",
    "Gold price requests served from the daily cache",
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "webhook_latency_seconds",
    "Sync webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "webhook_failures_total",
    "Failed webhook deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_ledger_operation(operation: str, unit: str) -> None:
    ledger_operation_counter.labels(operation=operation, unit=unit).inc()


def record_unallocated_payment(unit: str) -> None:
    unallocated_payment_counter.labels(unit=unit).inc()
