"""
Prometheus metrics for upstream traffic.
"""

from prometheus_client import Counter, Histogram

UPSTREAM_REQUESTS = Counter(
    "upstream_requests_total",
    "Outbound requests to third-party feeds",
    ["upstream", "outcome"],
)

UPSTREAM_LATENCY = Histogram(
    "upstream_request_seconds",
    "Latency of outbound requests",
    ["upstream"],
)

OPERATOR_SNAPSHOTS = Counter(
    "operator_snapshots_total",
    "GBFS operator snapshot builds",
    ["outcome"],
)
