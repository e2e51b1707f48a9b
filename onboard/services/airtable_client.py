# onboard/services/airtable_client.py
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx
import structlog

from onboard.core.contracts import AirtableConfig, AirtableRecord, CreateResponse, FieldRef
from onboard.core.errors import RecordStoreError
from onboard.schemas.intake import IntakePayload
from onboard.services.airtable_schema import AirtableSchemaClient

logger = structlog.get_logger(__name__)

ATTACHMENTS_FIELD = "Attachments"

# payload-attribuut -> Airtable veldnaam. Pas aan aan je eigen schema.
FIELD_MAP: List[Tuple[str, str]] = [
    ("company_name", "Company Name"),
    ("contact_name", "Contact Name"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("website", "Website"),
    ("instagram", "Instagram"),
    ("crm", "CRM"),
    ("email_platform", "Email Platform"),
    ("links.landing_pages", "Landing Pages"),
    ("links.calendars", "Calendars"),
    ("links.webinar_links", "Webinar Links"),
    ("links.forms_surveys", "Forms/Surveys"),
    ("links.other_assets", "Other Tech Assets"),
    ("brand_voice", "Brand Voice (Text)"),
    ("sales_pitch", "Sales Pitch (Text)"),
    ("offer_info", "Offer Info (Text)"),
    ("brand_faq", "Brand FAQ (Text)"),
    ("product_faq", "Product FAQ (Text)"),
    ("sales_guide", "Sales Guide (Text)"),
    ("lead_qualification", "Lead Qualification (Text)"),
    ("credentials", "Credentials/API Keys"),
    ("notes", "Notes"),
    ("loom_url", "Loom URL"),
]


def _resolve(payload: IntakePayload, path: str) -> Any:
    value: Any = payload
    for part in path.split("."):
        if value is None:
            return None
        value = getattr(value, part, None)
    return value


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    if isinstance(value, (list, tuple)) and len(value) == 0:
        return True
    return False


def build_fields(payload: IntakePayload, attachments_mode: str = "attachment") -> Dict[str, Any]:
    """Map an intake payload onto record-store fields; empty values are never sent."""
    fields: Dict[str, Any] = {}

    def set_field(name: str, value: Any) -> None:
        if _is_empty(value):
            return
        fields[name] = value

    for attr, name in FIELD_MAP:
        set_field(name, _resolve(payload, attr))

    uploaded = payload.uploaded_files or []
    set_field("Uploaded Files (names)", ", ".join(f.name for f in uploaded))

    attachments = payload.attachments or []
    mode = (attachments_mode or "attachment").lower()
    if mode == "attachment":
        # Voorkeur voor tokens uit de upload-flow, anders de URL-lijst
        tokens = [{"id": f.airtable_token_id} for f in uploaded if f.airtable_token_id]
        if tokens:
            set_field(ATTACHMENTS_FIELD, tokens)
        else:
            set_field(
                ATTACHMENTS_FIELD,
                [a.model_dump(exclude_none=True) for a in attachments],
            )
    elif mode == "text":
        set_field(ATTACHMENTS_FIELD, ", ".join(a.url for a in attachments) if attachments else None)

    set_field("Raw JSON", payload.to_wire_json())
    return fields


class AirtableRecordStore:
    """Record store backed by the Airtable REST API (create, fetch, schema lookup)."""

    def __init__(self, config: AirtableConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport
        self.schema = AirtableSchemaClient(config, transport=transport)

    def _table_url(self) -> str:
        return f"{self.config.api_url}/v0/{self.config.base_id}/{quote(self.config.table_name or '', safe='')}"

    async def create_record(self, payload: IntakePayload) -> CreateResponse:
        self.config.require("api_key", "base_id", "table_name")
        fields = build_fields(payload, self.config.attachments_mode)

        async with httpx.AsyncClient(transport=self.transport) as client:
            r = await client.post(
                self._table_url(),
                headers=self.config.auth_headers(),
                json={"fields": fields},
            )

        if not r.is_success:
            raise RecordStoreError(r.status_code, r.reason_phrase, r.text)

        created = CreateResponse.parse(r.json())
        logger.info(
            "record_created",
            record_id=created.record_id,
            shape=created.kind.value,
            field_count=len(fields),
        )
        return created

    async def fetch_record(self, record_id: str) -> Optional[AirtableRecord]:
        """Haal het volledige record op; None bij ontbrekende config of elke fout."""
        if not self.config.is_complete:
            return None

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                r = await client.get(
                    f"{self._table_url()}/{record_id}",
                    headers=self.config.auth_headers(),
                )
            if not r.is_success:
                logger.warning("record_fetch_failed", record_id=record_id, status=r.status_code)
                return None
            return AirtableRecord.from_json(r.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("record_fetch_error", record_id=record_id, error=str(e))
            return None

    async def find_field(self, table_name: str, field_name: str) -> Optional[FieldRef]:
        return await self.schema.find_field(table_name, field_name)
