# onboard/forms/onboarding.py
"""
Onboarding form state machine.

Houdt de formulierstate bij (waarden, geselecteerde bestanden, open secties,
veldfouten), leidt per sectie af of die compleet is en bouwt de multipart
submission voor /api/submit.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import structlog

from onboard.core.errors import SubmissionFailed, SubmissionRejected
from onboard.forms.phone import DEFAULT_COUNTRY, PhoneValue, derive_phone_value, transport_fields
from onboard.forms.validators import (
    is_valid_email,
    is_valid_instagram,
    is_valid_phone,
    is_valid_url,
    strip_handle,
)

logger = structlog.get_logger(__name__)

ACCEPTED_FILE_TYPES = ".pdf,.doc,.docx,.md,.txt,.csv,.xlsx"
ACCEPTED_EXTENSIONS = tuple(s.strip().lower() for s in ACCEPTED_FILE_TYPES.split(","))

CRM_OPTIONS: List[Tuple[str, str]] = [
    ("GoHighLevel (GHL)", "ghl"),
    ("HubSpot", "hubspot"),
    ("Mailchimp", "mailchimp"),
    ("Salesforce", "salesforce"),
    ("Pipedrive", "pipedrive"),
    ("Other / None", "other"),
]

SUCCESS_MESSAGE = "Thanks! We received your submission."

ERR_EMAIL = "Please enter a valid email address"
ERR_INSTAGRAM = "Please use letters, numbers, and periods only (max 30 characters)"
ERR_WEBSITE = "Please enter a valid website URL"
ERR_PHONE = "Enter a valid phone number"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    kind: str = "text"  # text | textarea | select | file | phone
    required: bool = False
    hint: Optional[str] = None
    placeholder: Optional[str] = None
    file_field: Optional[str] = None  # gekoppelde upload voor tekst-OF-bestand velden


@dataclass(frozen=True)
class SectionSpec:
    title: str
    subtitle: str
    fields: Tuple[FieldSpec, ...]


SECTIONS: Tuple[SectionSpec, ...] = (
    SectionSpec(
        "1) Brand Info",
        "Who are we launching for and how can we reach you?",
        (
            FieldSpec("companyName", "Company Name", required=True, placeholder="e.g., Acme Inc."),
            FieldSpec("contactName", "Contact Person Full Name", required=True, placeholder="e.g., Jane Doe"),
            FieldSpec("email", "Email Address", required=True, placeholder="you@company.com"),
            FieldSpec("phone", "Phone Number", kind="phone"),
            FieldSpec("website", "Website", placeholder="https://yourdomain.com"),
            FieldSpec("instagram", "Instagram Handle", required=True, placeholder="yourbrand"),
        ),
    ),
    SectionSpec(
        "2) Brand Voice & Offers",
        "Share the assets that shape your voice, pitch, and offer.",
        (
            FieldSpec("brandVoice", "Brand Voice Guide", "textarea", True, "Paste content or upload a file.",
                      "Tone, style, dos/don'ts...", "brandVoiceFile"),
            FieldSpec("salesPitch", "Sales Pitch Script", "textarea", True, "Paste content or upload a file.",
                      "Openers, hooks, objection handling...", "salesPitchFile"),
            FieldSpec("offerInfo", "Offer Information", "textarea", True, "Paste content or upload a file.",
                      None, "offerInfoFile"),
        ),
    ),
    SectionSpec(
        "3) Sales Process & FAQs",
        "Help our AI agents answer accurately and qualify leads.",
        (
            FieldSpec("brandFAQ", "Brand FAQ", "textarea", True, None,
                      "Company background, policies, etc.", "brandFAQFile"),
            FieldSpec("productFAQ", "Product FAQ", "textarea", True, None,
                      "Features, benefits, pricing, guarantees...", "productFAQFile"),
            FieldSpec("salesGuide", "Sales Guide (How to Sell via DM/Text)", "textarea", True, None,
                      "Process, scripts, decision trees...", "salesGuideFile"),
            FieldSpec("leadQualification", "Lead Qualification Criteria / Target Market", "textarea", True, None,
                      "Who is a qualified lead? What disqualifies them?", "leadQualificationFile"),
        ),
    ),
    SectionSpec(
        "4) Tech Access & Integrations",
        "Connect the tools needed for attribution, scheduling, and follow-up.",
        (
            FieldSpec("crm", "CRM Platform", "select", True, "Select the primary CRM or pipeline tool you use."),
            FieldSpec("emailPlatform", "Email Marketing Platform",
                      hint="Optional (e.g., Klaviyo, Mailchimp, ConvertKit)", placeholder="e.g., Klaviyo"),
            FieldSpec("links.landingPages", "Landing Pages (links)", "textarea", hint="Comma or line-separated URLs"),
            FieldSpec("links.calendars", "Calendars (links)", "textarea", hint="Calendly or GHL Calendar URLs"),
            FieldSpec("links.webinarLinks", "Webinar/Video Links", "textarea"),
            FieldSpec("links.formsSurveys", "Forms / Surveys", "textarea"),
            FieldSpec("links.otherAssets", "Any other relevant tech assets", "textarea"),
            FieldSpec("accessDocs", "Upload any access documents (PDF, DOCX, etc.)", "file"),
            FieldSpec("credentials", "Optional: Credentials / API Keys (secured)", "textarea",
                      placeholder="If sharing here, mask sensitive parts or provide password manager links."),
        ),
    ),
    SectionSpec(
        "5) Final Notes",
        "Share anything else we should know.",
        (
            FieldSpec("notes", "Additional Notes", "textarea", placeholder="Timeline, stakeholders, constraints..."),
            FieldSpec("loomUrl", "Optional: Loom video walkthrough (URL)",
                      placeholder="https://www.loom.com/share/..."),
        ),
    ),
)

# (tekstveld, bestandsveld, sectie, melding) in vaste controlevolgorde
TEXT_OR_FILE_REQUIREMENTS: Tuple[Tuple[str, str, int, str], ...] = (
    ("brandVoice", "brandVoiceFile", 1, "Brand Voice Guide is required (paste or upload)"),
    ("salesPitch", "salesPitchFile", 1, "Sales Pitch Script is required (paste or upload)"),
    ("offerInfo", "offerInfoFile", 1, "Offer Information is required (paste or upload)"),
    ("brandFAQ", "brandFAQFile", 2, "Brand FAQ is required (paste or upload)"),
    ("productFAQ", "productFAQFile", 2, "Product FAQ is required (paste or upload)"),
    ("salesGuide", "salesGuideFile", 2, "Sales Guide is required (paste or upload)"),
    ("leadQualification", "leadQualificationFile", 2, "Lead Qualification criteria is required (paste or upload)"),
)


def default_values() -> Dict[str, str]:
    return {
        "companyName": "",
        "contactName": "",
        "email": "",
        "phone": "",
        "website": "",
        "instagram": "",
        "crm": "",
        "emailPlatform": "",
        "links.landingPages": "",
        "links.calendars": "",
        "links.webinarLinks": "",
        "links.formsSurveys": "",
        "links.otherAssets": "",
        "brandVoice": "",
        "salesPitch": "",
        "offerInfo": "",
        "brandFAQ": "",
        "productFAQ": "",
        "salesGuide": "",
        "leadQualification": "",
        "credentials": "",
        "notes": "",
        "loomUrl": "",
    }


def default_phone() -> PhoneValue:
    return PhoneValue(country=DEFAULT_COUNTRY, raw="", national="")


@dataclass
class SelectedFile:
    name: str
    size: int
    content_type: str = "application/octet-stream"
    data: bytes = field(default=b"", repr=False)

    @property
    def dedupe_key(self) -> Tuple[str, int]:
        return (self.name, self.size)

    @property
    def extension(self) -> str:
        dot = self.name.rfind(".")
        return self.name[dot:].lower() if dot >= 0 else ""


class OnboardingForm:
    """State for one onboarding session; mutated only through the handlers below."""

    def __init__(self) -> None:
        self.values: Dict[str, str] = default_values()
        self.files_by_field: Dict[str, List[SelectedFile]] = {}
        self.file_counts: Dict[str, int] = {}
        self.open_sections: List[bool] = [True, False, False, False, False]
        self.field_errors: Dict[str, str] = {}
        self.phone: PhoneValue = default_phone()
        self.error: Optional[str] = None
        self.success: Optional[str] = None
        self.submitting = False

    # ---------- values ----------

    def handle_change(self, name: str, value: str) -> None:
        if name not in self.values:
            raise KeyError(f"Unknown form field: {name}")
        if name == "instagram":
            value = strip_handle(value)
        self.values[name] = value
        self.validate_field(name, value)

    def validate_field(self, name: str, value: str) -> None:
        if name == "email":
            ok = is_valid_email(value) if value else True
            self._set_error("email", None if ok else ERR_EMAIL)
        if name == "instagram":
            stripped = strip_handle(value)
            ok = is_valid_instagram(stripped) if stripped else True
            self._set_error("instagram", None if ok else ERR_INSTAGRAM)
        if name == "website":
            ok = is_valid_url(value) if value else True
            self._set_error("website", None if ok else ERR_WEBSITE)

    def set_phone(self, raw: str, country: Optional[str] = None) -> PhoneValue:
        self.phone = derive_phone_value(raw, country or self.phone.country)
        self.values["phone"] = self.phone.raw
        invalid = bool(self.phone.raw) and not self.phone.e164
        self._set_error("phone", ERR_PHONE if invalid else None)
        return self.phone

    def _set_error(self, name: str, message: Optional[str]) -> None:
        if message:
            self.field_errors[name] = message
        else:
            self.field_errors.pop(name, None)

    # ---------- sections ----------

    def toggle_open(self, index: int) -> None:
        self.open_sections = [not v if i == index else v for i, v in enumerate(self.open_sections)]

    def _open(self, index: int) -> None:
        self.open_sections = [True if i == index else v for i, v in enumerate(self.open_sections)]

    def _has_text_or_file(self, value_key: str, file_key: str) -> bool:
        return bool(self.values.get(value_key, "").strip()) or self.file_counts.get(file_key, 0) > 0

    def section_completed(self, index: int) -> bool:
        v = self.values
        if index == 0:
            if not v["companyName"] or not v["contactName"]:
                return False
            if not v["email"] or not is_valid_email(v["email"]):
                return False
            handle = strip_handle(v["instagram"])
            if not handle or not is_valid_instagram(handle):
                return False
            if v["phone"] and not is_valid_phone(v["phone"]):
                return False
            if v["website"] and not is_valid_url(v["website"]):
                return False
            return True
        if index in (1, 2):
            return all(
                self._has_text_or_file(value_key, file_key)
                for value_key, file_key, section, _ in TEXT_OR_FILE_REQUIREMENTS
                if section == index
            )
        if index == 3:
            # alleen CRM telt; overige velden blokkeren nooit, ook niet als ze ongeldig zijn
            return bool(v["crm"])
        if index == 4:
            loom = v["loomUrl"]
            if loom and not is_valid_url(loom):
                return False
            return bool(v["notes"] or loom)
        return False

    # ---------- files ----------

    def add_selected_files(self, field_key: str, files: Iterable[SelectedFile]) -> int:
        accepted = [f for f in files if f.extension in ACCEPTED_EXTENSIONS]
        merged: Dict[Tuple[str, int], SelectedFile] = {}
        for f in [*self.files_by_field.get(field_key, []), *accepted]:
            merged[f.dedupe_key] = f
        self.files_by_field[field_key] = list(merged.values())
        self.file_counts[field_key] = len(self.files_by_field[field_key])
        return self.file_counts[field_key]

    def remove_file(self, field_key: str, index: int) -> None:
        current = list(self.files_by_field.get(field_key, []))
        if 0 <= index < len(current):
            current.pop(index)
        self.files_by_field[field_key] = current
        self.file_counts[field_key] = len(current)

    def clear_files(self, field_key: str) -> None:
        self.files_by_field[field_key] = []
        self.file_counts[field_key] = 0

    def clear_all_files(self) -> None:
        self.files_by_field = {}
        self.file_counts = {}

    # ---------- submit ----------

    def check_required(self) -> None:
        """Raise SubmissionRejected for the first missing requirement, in fixed order."""
        if not self.values["instagram"]:
            raise SubmissionRejected("Instagram Handle is required", 0)
        for value_key, file_key, section, message in TEXT_OR_FILE_REQUIREMENTS:
            if not self._has_text_or_file(value_key, file_key):
                raise SubmissionRejected(message, section)

    def validate_required(self) -> bool:
        try:
            self.check_required()
        except SubmissionRejected as e:
            self.error = str(e)
            if e.section is not None:
                self._open(e.section)
            return False
        self.error = None
        return True

    def build_submission(self) -> Tuple[List[Tuple[str, str]], List[Tuple[str, Tuple[str, bytes, str]]]]:
        """Text fields and file parts for the multipart body; only files still selected are sent."""
        data: List[Tuple[str, str]] = [(k, v) for k, v in self.values.items() if not k.startswith("links.")]
        data += [(k, v) for k, v in self.values.items() if k.startswith("links.")]
        data += list(transport_fields(self.phone).items())

        files: List[Tuple[str, Tuple[str, bytes, str]]] = []
        for field_key, selected in self.files_by_field.items():
            for f in selected:
                files.append((field_key, (f.name, f.data, f.content_type)))
        return data, files

    def reset(self) -> None:
        self.values = default_values()
        self.clear_all_files()
        self.phone = default_phone()
        self.field_errors = {}

    def submit(self, submitter: Any) -> Optional[Dict[str, Any]]:
        """
        Valideer en verstuur. Bij een validatiefout gaat er niets over het netwerk.

        Returns:
            JSON-antwoord van de server, of None als er niet (succesvol) verstuurd is
        """
        self.submitting = True
        self.success = None
        self.error = None
        try:
            if not self.validate_required():
                return None
            data, files = self.build_submission()
            result = submitter.submit(data, files)
            logger.info("form_submitted", files=sum(len(v) for v in self.files_by_field.values()))
            self.success = SUCCESS_MESSAGE
            self.reset()
            return result
        except SubmissionFailed as e:
            self.error = str(e) or "Something went wrong"
            return None
        finally:
            self.submitting = False
