# onboard/routers/form.py
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from onboard.forms.onboarding import ACCEPTED_FILE_TYPES, CRM_OPTIONS, SECTIONS, OnboardingForm

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["form"])


@router.get("/", response_class=HTMLResponse)
def onboarding_form(request: Request):
    form = OnboardingForm()
    return templates.TemplateResponse(
        request,
        "onboarding_form.html",
        {
            "sections": SECTIONS,
            "open_sections": form.open_sections,
            "completed": [form.section_completed(i) for i in range(len(SECTIONS))],
            "crm_options": CRM_OPTIONS,
            "accept": ACCEPTED_FILE_TYPES,
            "submit_url": "/api/submit",
        },
    )
