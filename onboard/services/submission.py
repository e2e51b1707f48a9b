# onboard/services/submission.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import structlog
from starlette.datastructures import FormData, UploadFile

from onboard.core.contracts import (
    AirtableRecord,
    CreateResponse,
    IncomingFile,
    RecordStore,
    WebhookResult,
)
from onboard.schemas.intake import IntakeLinks, IntakePayload, UploadedFileSummary
from onboard.services.airtable_client import ATTACHMENTS_FIELD
from onboard.services.airtable_upload import AttachmentUploader, fits_direct_upload
from onboard.services.webhooks import WebhookNotifier

logger = structlog.get_logger(__name__)

_UNSAFE_FIELD_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")
_NON_DIGITS = re.compile(r"[^0-9]")

# formulier-veldnaam -> payload-attribuut
TEXT_FIELDS: Dict[str, str] = {
    "companyName": "company_name",
    "contactName": "contact_name",
    "email": "email",
    "website": "website",
    "instagram": "instagram",
    "crm": "crm",
    "emailPlatform": "email_platform",
    "brandVoice": "brand_voice",
    "salesPitch": "sales_pitch",
    "offerInfo": "offer_info",
    "brandFAQ": "brand_faq",
    "productFAQ": "product_faq",
    "salesGuide": "sales_guide",
    "leadQualification": "lead_qualification",
    "credentials": "credentials",
    "notes": "notes",
    "loomUrl": "loom_url",
}

LINK_FIELDS: Dict[str, str] = {
    "links.landingPages": "landing_pages",
    "links.calendars": "calendars",
    "links.webinarLinks": "webinar_links",
    "links.formsSurveys": "forms_surveys",
    "links.otherAssets": "other_assets",
}


def sanitize_field_name(name: str) -> str:
    return _UNSAFE_FIELD_CHARS.sub("_", name)


def renamed_filename(field: str, original: str) -> str:
    """`brandVoiceFile` + `guide.final.PDF` -> `brandVoiceFile.PDF`."""
    dot = original.rfind(".")
    ext = original[dot:] if dot >= 0 else ""
    return f"{sanitize_field_name(field)}{ext}"


def resolve_phone(get_text) -> str:
    """
    Voorkeur: E.164, dan landcode + nationale cijfers, dan het ruwe veld.

    De combinatie code+nationaal wordt niet gevalideerd; best-effort, kan ongeldig zijn.
    """
    e164 = get_text("phone_e164")
    if e164:
        return e164
    code = get_text("phone_code")
    national = get_text("phone_national")
    if code and national:
        return f"{code}{_NON_DIGITS.sub('', national)}"
    return get_text("phone")


@dataclass
class SubmissionResult:
    created: CreateResponse
    fetched: Optional[AirtableRecord]
    webhook: WebhookResult
    webhook2: WebhookResult

    def to_response(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "airtable": self.created.raw,
            "record": self.fetched.to_dict() if self.fetched else self.created.raw,
            "webhook": self.webhook.to_dict(),
            "webhook2": self.webhook2.to_dict(),
        }


class SubmissionService:
    """Orchestrates one intake submission: uploads, create, fallback attach, fetch, webhooks."""

    def __init__(
        self,
        store: RecordStore,
        uploader: AttachmentUploader,
        notifier: WebhookNotifier,
        table_name: Optional[str] = None,
    ):
        self.store = store
        self.uploader = uploader
        self.notifier = notifier
        self.table_name = table_name

    # ---------- multipart ----------

    async def read_files(self, form: FormData) -> List[IncomingFile]:
        files: List[IncomingFile] = []
        for key, value in form.multi_items():
            if not isinstance(value, UploadFile):
                continue
            data = await value.read()
            if not data:
                continue
            original = value.filename or ""
            files.append(
                IncomingFile(
                    field=key,
                    original_name=original,
                    name=renamed_filename(key, original),
                    content_type=value.content_type or "",
                    data=data,
                )
            )
        return files

    async def upload_tokens(self, files: List[IncomingFile]) -> List[Tuple[IncomingFile, UploadedFileSummary]]:
        # Sequentieel: één upload tegelijk
        out: List[Tuple[IncomingFile, UploadedFileSummary]] = []
        for f in files:
            token = await self.uploader.upload_token(f.data, f.name, f.content_type)
            summary = UploadedFileSummary(
                field=f.field,
                name=f.name,
                size=f.size,
                type=f.content_type,
                airtable_token_id=token or None,
            )
            out.append((f, summary))
        return out

    @staticmethod
    def payload_from_form(form: FormData, uploaded: List[UploadedFileSummary]) -> IntakePayload:
        def get_text(name: str) -> str:
            value = form.get(name)
            return value if isinstance(value, str) else ""

        data: Dict[str, Any] = {attr: get_text(name) for name, attr in TEXT_FIELDS.items()}
        data["phone"] = resolve_phone(get_text)
        data["links"] = IntakeLinks(**{attr: get_text(name) for name, attr in LINK_FIELDS.items()})
        data["uploaded_files"] = uploaded
        data["attachments"] = []
        return IntakePayload(**data)

    async def attach_fallback(
        self,
        record_id: str,
        entries: List[Tuple[IncomingFile, UploadedFileSummary]],
    ) -> None:
        """Bestanden zonder token direct aan het record hangen (<= 5 MB). Best-effort."""
        pending = [
            f for f, summary in entries
            if not summary.airtable_token_id and fits_direct_upload(f.size)
        ]
        skipped = [f.name for f, summary in entries if not summary.airtable_token_id and not fits_direct_upload(f.size)]
        if skipped:
            logger.info("direct_upload_skipped_oversize", record_id=record_id, files=skipped)
        if not pending:
            return

        field_ref = await self.store.find_field(self.table_name or "", ATTACHMENTS_FIELD)
        target = field_ref.field_id if field_ref else ATTACHMENTS_FIELD
        for f in pending:
            await self.uploader.upload_to_record(
                record_id=record_id,
                field=target,
                data=f.data,
                content_type=f.content_type or "application/octet-stream",
                filename=f.name,
            )

    async def submit_form(self, form: FormData) -> SubmissionResult:
        files = await self.read_files(form)
        entries = await self.upload_tokens(files)
        payload = self.payload_from_form(form, [summary for _, summary in entries])

        created = await self.store.create_record(payload)

        if created.record_id:
            try:
                await self.attach_fallback(created.record_id, entries)
            except Exception:
                # record staat er al; fallback mag de submit nooit laten falen
                logger.warning("attachment_fallback_failed", record_id=created.record_id, exc_info=True)

        return await self._finish(created)

    # ---------- JSON ----------

    async def submit_json(self, body: Any) -> SubmissionResult:
        payload = IntakePayload.model_validate(body if isinstance(body, dict) else {})
        created = await self.store.create_record(payload)
        return await self._finish(created)

    async def _finish(self, created: CreateResponse) -> SubmissionResult:
        fetched = await self.store.fetch_record(created.record_id) if created.record_id else None
        records = created.records_for_webhook(fetched)
        webhook, webhook2 = await self.notifier.notify_all(records)
        logger.info(
            "submission_completed",
            record_id=created.record_id,
            fetched=fetched is not None,
            webhook_ok=webhook.ok,
            webhook2_ok=webhook2.ok,
        )
        return SubmissionResult(created=created, fetched=fetched, webhook=webhook, webhook2=webhook2)
