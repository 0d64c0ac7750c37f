"""HTTP metrics middleware."""

import time

from flask import Flask, Response, g, request

from task_manager.telemetry import get_meter


SKIPPED_PATHS = ("/api/health",)


def register_metrics_middleware(app: Flask) -> None:
    """Register HTTP request counter and latency histogram on the app.

    Args:
        app: Flask application instance.
    """
    meter = get_meter(__name__)

    http_requests_total = meter.create_counter(
        name="http_requests_total",
        description="Total HTTP requests",
        unit="1",
    )
    http_request_duration = meter.create_histogram(
        name="http_request_duration_ms",
        description="HTTP request duration in milliseconds",
        unit="ms",
    )

    @app.before_request
    def start_timer() -> None:
        g.request_start_time = time.perf_counter()

    @app.after_request
    def record_request(response: Response) -> Response:
        if request.path in SKIPPED_PATHS:
            return response

        start_time = getattr(g, "request_start_time", None)
        duration_ms = (time.perf_counter() - start_time) * 1000 if start_time else 0

        attributes = {
            "method": request.method,
            # Route pattern keeps task/user ids out of the label set
            "route": request.url_rule.rule if request.url_rule else "unmatched",
            "status": str(response.status_code),
            "authenticated": str(getattr(g, "current_user", None) is not None).lower(),
        }

        http_requests_total.add(1, attributes)
        http_request_duration.record(duration_ms, attributes)

        return response
