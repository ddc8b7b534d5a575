"""
Prometheus metrics for credential acquisition and Partner Center traffic.

Provides instrumentation for:
- Credential acquisitions by strategy and outcome
- Key Vault secret resolutions
- HTTP requests and retries through cached clients
- Size of the HTTP client cache
"""

from prometheus_client import Counter, Gauge, Histogram

credential_acquisitions_total = Counter(
    "partner_center_credential_acquisitions_total",
    "Total number of credential acquisitions",
    ["strategy", "status"],  # status: success, error, cancelled
)

credential_acquisition_duration_seconds = Histogram(
    "partner_center_credential_acquisition_seconds",
    "Time spent acquiring a credential, including vault lookups",
    ["strategy"],
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

secret_resolutions_total = Counter(
    "partner_center_secret_resolutions_total",
    "Total number of Key Vault secret lookups",
    ["status"],  # status: success, denied, error
)

http_requests_total = Counter(
    "partner_center_http_requests_total",
    "Total number of HTTP attempts sent to Partner Center",
    ["method", "status"],  # status: HTTP status code or error category
)

http_retries_total = Counter(
    "partner_center_http_retries_total",
    "Total number of HTTP retries by reason",
    ["reason"],  # reason: timeout, connection, throttled, server_error
)

cached_http_clients = Gauge(
    "partner_center_cached_http_clients",
    "Number of HTTP clients held by the client cache",
)


def record_credential_acquisition(strategy: str, status: str, duration: float) -> None:
    """Record one credential acquisition attempt."""
    credential_acquisitions_total.labels(strategy=strategy, status=status).inc()
    credential_acquisition_duration_seconds.labels(strategy=strategy).observe(duration)


def record_secret_resolution(status: str) -> None:
    """Record one Key Vault secret lookup."""
    secret_resolutions_total.labels(status=status).inc()


def record_http_request(method: str, status: str) -> None:
    """Record one HTTP attempt."""
    http_requests_total.labels(method=method, status=status).inc()


def record_http_retry(reason: str) -> None:
    """Record one HTTP retry."""
    http_retries_total.labels(reason=reason).inc()


def set_cached_clients(count: int) -> None:
    """Update the cached client gauge."""
    cached_http_clients.set(count)
