# onboard/observability/metrics.py
from fastapi import APIRouter
from starlette.responses import Response

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

router = APIRouter(tags=["observability"])

submission_counter = Counter(
    "onboard_submissions_total",
    "Aantal intake submissions",
    ["result"],  # success|error
)

webhook_counter = Counter(
    "onboard_webhook_total",
    "Aantal webhook calls",
    ["target", "result"],  # primary|secondary, ok|failed
)

attachment_upload_counter = Counter(
    "onboard_attachment_uploads_total",
    "Aantal attachment uploads naar de record store",
    ["path", "result"],  # token|direct, ok|failed|skipped
)

submit_latency_hist = Histogram(
    "onboard_submit_latency_seconds",
    "Latency van /api/submit",
    ["content"],  # multipart|json
)


@router.get("/metrics", include_in_schema=True)
def metrics() -> Response:
    # Prometheus expects text/plain; version=0.0.4
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
