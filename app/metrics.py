from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "path", "status"],
)
REQUEST_ERRORS = Counter(
    "http_request_errors_total",
    "Total HTTP 5xx responses",
    ["method", "path", "status"],
)

COLLABORATOR_REQUESTS = Counter(
    "topology_collaborator_requests_total",
    "Requests issued to collaborator services",
    ["service", "operation", "outcome"],
)
COLLABORATOR_LATENCY = Histogram(
    "topology_collaborator_request_duration_seconds",
    "Collaborator request latency",
    ["service", "operation"],
)

TRACE_DURATION = Histogram(
    "topology_trace_duration_seconds",
    "Topology trace duration",
    ["operation", "status"],
)


def observe_collaborator_call(
    service: str, operation: str, outcome: str, duration: float
) -> None:
    COLLABORATOR_REQUESTS.labels(service=service, operation=operation, outcome=outcome).inc()
    COLLABORATOR_LATENCY.labels(service=service, operation=operation).observe(duration)


def observe_trace(operation: str, status: str, duration: float) -> None:
    TRACE_DURATION.labels(operation=operation, status=status).observe(duration)
