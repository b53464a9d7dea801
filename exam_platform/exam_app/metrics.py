"""Prometheus metrics helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

REQUEST_COUNT = Counter(
    "exam_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "exam_request_latency_seconds",
    "Latency of HTTP requests in seconds",
    ["endpoint"],
)
STRIPE_EVENTS = Counter(
    "exam_stripe_webhook_events_total",
    "Stripe webhook events received",
    ["event_type", "outcome"],
)
COMPLETIONS_RECORDED = Counter(
    "exam_question_completions_total",
    "Question completions recorded",
    ["question_type", "action"],
)
FORM_SUBMISSIONS = Counter(
    "exam_form_submissions_total",
    "Contact and feedback form submissions",
    ["form", "outcome"],
)
DASHBOARD_LOADER_FAILURES = Counter(
    "exam_dashboard_loader_failures_total",
    "Dashboard loaders that failed and fell back to defaults",
    ["loader"],
)


def record_request(method: str, endpoint: str, status: int, latency: float) -> None:
    REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=status).inc()
    REQUEST_LATENCY.labels(endpoint=endpoint).observe(latency)


def record_stripe_event(event_type: str, outcome: str) -> None:
    STRIPE_EVENTS.labels(event_type=event_type, outcome=outcome).inc()


def record_completion(question_type: str, action: str) -> None:
    COMPLETIONS_RECORDED.labels(question_type=question_type, action=action).inc()


def record_form_submission(form: str, outcome: str) -> None:
    FORM_SUBMISSIONS.labels(form=form, outcome=outcome).inc()


def record_loader_failure(loader: str) -> None:
    DASHBOARD_LOADER_FAILURES.labels(loader=loader).inc()


def latest_metrics() -> tuple[bytes, str]:
    data = generate_latest()
    return data, CONTENT_TYPE_LATEST
