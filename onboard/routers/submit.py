# onboard/routers/submit.py
import time

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from onboard.dependencies import get_submission_service
from onboard.observability.metrics import submission_counter, submit_latency_hist
from onboard.services.submission import SubmissionService

router = APIRouter(prefix="/api", tags=["submit"])
logger = structlog.get_logger(__name__)


@router.post("/submit")
async def submit_intake(
    request: Request,
    service: SubmissionService = Depends(get_submission_service),
):
    content_type = request.headers.get("content-type", "")
    kind = "multipart" if "multipart/form-data" in content_type else "json"
    start = time.time()

    try:
        if kind == "multipart":
            form = await request.form()
            result = await service.submit_form(form)
        else:
            # JSON fallback; ongeldige body telt als lege payload
            try:
                body = await request.json()
            except ValueError:
                body = {}
            result = await service.submit_json(body)
    except Exception:
        logger.exception("submit_failed", content=kind)
        submission_counter.labels(result="error").inc()
        return JSONResponse(status_code=500, content={"ok": False, "error": "Submission failed"})
    finally:
        submit_latency_hist.labels(content=kind).observe(time.time() - start)

    submission_counter.labels(result="success").inc()
    return result.to_response()
