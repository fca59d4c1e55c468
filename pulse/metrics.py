"""
Prometheus metrics for Pulse API
"""

from prometheus_client import Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST

from .config import API_VERSION, APP_NAME

# Build info
BUILD_INFO = Gauge(
    'pulse_build_info',
    'Build information',
    ['version', 'app']
)

# Request counters
REQUESTS_TOTAL = Counter(
    'pulse_requests_total',
    'Total number of requests',
    ['status_class', 'path_group']
)

REQUEST_LATENCY_SECONDS = Histogram(
    'pulse_request_latency_seconds',
    'HTTP request latency in seconds (stream requests measure time to first byte)',
    ['path_group'],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0]
)

# Ingestion
RECORDS_INGESTED_TOTAL = Counter(
    'pulse_records_ingested_total',
    'Total number of records stored',
    ['kind']
)

INGEST_REJECTED_TOTAL = Counter(
    'pulse_ingest_rejected_total',
    'Total number of ingestion requests rejected by validation',
    ['kind']
)

# Broadcast
EVENTS_PUBLISHED_TOTAL = Counter(
    'pulse_events_published_total',
    'Total number of live events published',
    ['kind']
)

DELIVERY_FAILURES_TOTAL = Counter(
    'pulse_delivery_failures_total',
    'Total number of failed writes to live subscribers'
)

SUBSCRIBERS = Gauge(
    'pulse_subscribers',
    'Currently connected live subscribers across all tenants'
)

TENANTS = Gauge(
    'pulse_tenants',
    'Tenant stores held in memory'
)

BUILD_INFO.labels(version=API_VERSION, app=APP_NAME).set(1)


def _status_class(status_code: int) -> str:
    if 200 <= status_code < 300:
        return "2xx"
    elif 400 <= status_code < 500:
        return "4xx"
    elif 500 <= status_code < 600:
        return "5xx"
    return "other"


def _path_group(path: str) -> str:
    if path.startswith("/ingest"):
        return "ingest"
    elif path.startswith("/stats"):
        return "stats"
    elif path.startswith("/events"):
        return "events"
    return "other"


def observe_request(status_code: int, path: str, latency_s: float):
    """Count one HTTP request and record its latency."""
    group = _path_group(path)
    REQUESTS_TOTAL.labels(status_class=_status_class(status_code), path_group=group).inc()
    REQUEST_LATENCY_SECONDS.labels(path_group=group).observe(latency_s)


def get_metrics() -> bytes:
    """Get Prometheus metrics in text format."""
    return generate_latest()


def get_content_type() -> str:
    return CONTENT_TYPE_LATEST
