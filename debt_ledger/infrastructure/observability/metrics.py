"""Prometheus metrics for ledger activity and request latency"""

from prometheus_client import Counter, Histogram

# Ledger activity
ledger_mutation_counter = Counter(
    "debt_ledger_mutations_total",
    "Committed ledger writes",
    ["entity", "action"],  # bank | loan_transaction | payment; create | update | delete
)

validation_failure_counter = Counter(
    "debt_ledger_validation_failures_total",
    "Requests rejected by a validation rule",
    ["kind"],  # exception class name
)

report_counter = Counter(
    "debt_ledger_reports_total",
    "Reports generated",
    ["report"],  # monthly | category | due_date
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_mutation(entity: str, action: str) -> None:
    ledger_mutation_counter.labels(entity=entity, action=action).inc()


def record_rejection(error: Exception) -> None:
    validation_failure_counter.labels(kind=type(error).__name__).inc()
