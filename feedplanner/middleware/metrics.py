"""Metrics endpoint, request tracking middleware and workflow counters.

Tracks request count, latency, active requests and error rate, plus one
counter per post transition action and outcome.
"""
import logging
import time
from collections import defaultdict, deque
from collections.abc import Iterable

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import PlainTextResponse, Response

logger = logging.getLogger(__name__)

# Latency quantiles cover the most recent requests only
HISTOGRAM_WINDOW = 10_000

# In-memory, per process
_metrics: dict[str, float] = defaultdict(float)
_histograms: dict[str, deque[float]] = defaultdict(lambda: deque(maxlen=HISTOGRAM_WINDOW))
_transitions: dict[tuple[str, str], int] = defaultdict(int)

SLOW_REQUEST_SECONDS = 0.5


def record_transition(action: str, outcome: str) -> None:
    """Count one post transition attempt; outcome is applied/denied/conflict."""
    _transitions[(action, outcome)] += 1


def transition_count(action: str, outcome: str) -> int:
    return _transitions.get((action, outcome), 0)


def observe_duration(seconds: float) -> None:
    _histograms["http_request_duration_seconds"].append(seconds)


def observed_durations() -> list[float]:
    return list(_histograms.get("http_request_duration_seconds", ()))


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        _metrics["http_requests_active"] += 1

        try:
            response = await call_next(request)
            status = response.status_code
        except Exception:
            status = 500
            _metrics["http_requests_errors_total"] += 1
            raise
        finally:
            duration = time.time() - start
            _metrics["http_requests_active"] -= 1
            _metrics["http_requests_total"] += 1
            observe_duration(duration)
            _metrics[f"http_requests_by_status_{status // 100}xx"] += 1

            if duration > SLOW_REQUEST_SECONDS:
                logger.warning(
                    "Slow request %s %s: %.2fms (status %s)",
                    request.method, request.url.path, duration * 1000, status,
                )

        return response


def _percentile(data: Iterable[float], p: float) -> float:
    sorted_data = sorted(data)
    if not sorted_data:
        return 0.0
    idx = int(len(sorted_data) * p / 100)
    return sorted_data[min(idx, len(sorted_data) - 1)]


def render_metrics() -> str:
    durations = observed_durations()
    lines = [
        "# HELP http_requests_total Total HTTP requests",
        "# TYPE http_requests_total counter",
        f'http_requests_total {_metrics["http_requests_total"]:.0f}',
        "",
        "# HELP http_requests_active Active HTTP requests",
        "# TYPE http_requests_active gauge",
        f'http_requests_active {_metrics["http_requests_active"]:.0f}',
        "",
        "# HELP http_requests_errors_total Total HTTP errors",
        "# TYPE http_requests_errors_total counter",
        f'http_requests_errors_total {_metrics["http_requests_errors_total"]:.0f}',
        "",
        "# HELP http_request_duration_seconds Request duration",
        "# TYPE http_request_duration_seconds summary",
    ]
    for q in (50, 90, 99):
        lines.append(
            f'http_request_duration_seconds{{quantile="{q / 100}"}} {_percentile(durations, q):.6f}'
        )
    lines += [
        f'http_request_duration_seconds_count {_metrics["http_requests_total"]:.0f}',
        "",
        "# HELP http_requests_by_status HTTP requests by status class",
        "# TYPE http_requests_by_status counter",
    ]
    for klass in ("2xx", "3xx", "4xx", "5xx"):
        lines.append(
            f'http_requests_by_status{{status="{klass}"}} {_metrics[f"http_requests_by_status_{klass}"]:.0f}'
        )
    lines += [
        "",
        "# HELP post_transitions_total Post workflow transitions by action and outcome",
        "# TYPE post_transitions_total counter",
    ]
    for (action, outcome), count in sorted(_transitions.items()):
        lines.append(f'post_transitions_total{{action="{action}",outcome="{outcome}"}} {count}')
    return "\n".join(lines) + "\n"


def setup_metrics(app: FastAPI) -> None:
    """Register the /metrics endpoint."""

    @app.get("/metrics", tags=["monitoring"], include_in_schema=False)
    async def metrics_endpoint():
        return PlainTextResponse(render_metrics(), media_type="text/plain")
