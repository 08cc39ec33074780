from prometheus_client import CollectorRegistry, Counter, generate_latest


class RequestMetrics:
    """
    Per-app Prometheus registry for responses served by this process.
    Exposed via app.state.request_metrics and appended to /metrics.
    """

    def __init__(self) -> None:
        self.registry = CollectorRegistry()
        self.http_requests = Counter(
            "tikky_http_requests",
            "HTTP responses served, by status code",
            ["status"],
            registry=self.registry,
        )
        self.http_errors = Counter(
            "tikky_http_errors",
            "HTTP responses with a 5xx status",
            registry=self.registry,
        )

    def record(self, status_code: int) -> None:
        self.http_requests.labels(status=str(status_code)).inc()
        if status_code >= 500:
            self.http_errors.inc()

    def exposition(self) -> str:
        return generate_latest(self.registry).decode("utf-8")
