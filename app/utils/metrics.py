"""
Prometheus-based metrics for production monitoring.
Provides /metrics endpoint for scraping.
"""
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter, Response


# Counters
generation_requests_total = Counter(
    "generation_requests_total",
    "Total image generation requests",
    ["mode", "outcome"],  # outcome: ok or failure_type
)

upstream_requests_total = Counter(
    "upstream_requests_total",
    "Total upstream provider calls",
    ["provider", "status"],
)

variations_returned_total = Counter(
    "variations_returned_total",
    "Total normalized image variations returned",
    ["mode"],
)

# Histograms
generation_duration_seconds = Histogram(
    "generation_duration_seconds",
    "End-to-end generation request duration",
    ["mode"],
    buckets=[1, 5, 10, 30, 60, 120, 300],
)


# Metrics endpoint router
router = APIRouter()


@router.get("/metrics")
def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint for scraping."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
