# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics — single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "roster_requests_total",
    "Total HTTP requests to the roster service",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "roster_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "roster_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
MEMBERS_TOTAL = Gauge(
    "roster_members",
    "Number of member records seen by the last full load",
)
SWEEP_RUNS = Counter(
    "roster_sweep_runs_total",
    "Total expiry sweep passes",
    ["status"],
)
SWEEP_DURATION = Histogram(
    "roster_sweep_duration_seconds",
    "Time to run one expiry sweep pass end-to-end",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)
REMINDERS = Counter(
    "roster_reminders_total",
    "Expiry reminders by outcome",
    ["outcome"],
)
