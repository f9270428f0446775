from __future__ import annotations

from prometheus_client import Counter, Histogram

from core.config import settings

FETCH_TOTAL = Counter(
    "requestable_fetch_total",
    "Total fetch calls by outcome and domain.",
    ["outcome", "domain"],
)
FETCH_DURATION = Histogram(
    "requestable_fetch_duration_seconds",
    "Fetch duration in seconds, from request issue to callback.",
    ["domain"],
)


def record_fetch(outcome: str | None, host: str | None, seconds: float | None = None) -> None:
    if not settings.metrics_enabled:
        return
    domain = _label(host, "unknown")
    FETCH_TOTAL.labels(outcome=_label(outcome, "unknown"), domain=domain).inc()
    if seconds is not None:
        FETCH_DURATION.labels(domain=domain).observe(seconds)


def _label(value: str | None, fallback: str) -> str:
    if value is None:
        return fallback
    value = str(value).strip()
    return value or fallback
