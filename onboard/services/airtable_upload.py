# onboard/services/airtable_upload.py
import base64
from typing import Any, Optional
from urllib.parse import quote

import httpx
import structlog

from onboard.core.contracts import AirtableConfig, UploadResult
from onboard.observability.metrics import attachment_upload_counter

logger = structlog.get_logger(__name__)

# Content API accepteert max 5 MB per bestand
MAX_DIRECT_UPLOAD_BYTES = 5 * 1024 * 1024


def fits_direct_upload(size: int) -> bool:
    return size <= MAX_DIRECT_UPLOAD_BYTES


def extract_token(data: Any) -> Optional[str]:
    """Pak het attachment token uit `{id}`, `{attachment: {id}}` of `{token}` (eerste match wint)."""
    if not isinstance(data, dict):
        return None
    attachment = data.get("attachment")
    nested = attachment.get("id") if isinstance(attachment, dict) else None
    return data.get("id") or nested or data.get("token") or None


class AttachmentUploader:
    """Uploads files to the record store: token upload and direct record upload."""

    def __init__(self, config: AirtableConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    def _token_urls(self) -> tuple[str, str]:
        base = self.config.base_id
        return (
            f"{self.config.api_url}/v0/bases/{base}/attachments",
            f"{self.config.api_url}/v0/{base}/attachments",
        )

    async def upload_token(self, data: bytes, filename: str, content_type: str = "") -> Optional[str]:
        """
        Upload bytes en geef een herbruikbaar attachment token terug.

        Op 404 proberen we één keer het alternatieve pad; elke andere fout
        levert None op (geen exception).
        """
        self.config.require("api_key", "base_id")
        primary, fallback = self._token_urls()
        files = {"file": (filename, data, content_type or "application/octet-stream")}

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                r = await client.post(primary, headers=self.config.auth_headers(), files=files)
                if not r.is_success and r.status_code == 404:
                    first_body = r.text
                    r = await client.post(fallback, headers=self.config.auth_headers(), files=files)
                    if not r.is_success:
                        logger.error(
                            "token_upload_failed_both_endpoints",
                            filename=filename,
                            primary=first_body,
                            fallback=r.text,
                        )
                        attachment_upload_counter.labels(path="token", result="failed").inc()
                        return None
                elif not r.is_success:
                    logger.error("token_upload_failed", filename=filename, status=r.status_code, body=r.text)
                    attachment_upload_counter.labels(path="token", result="failed").inc()
                    return None
        except httpx.HTTPError as e:
            logger.error("token_upload_error", filename=filename, error=str(e))
            attachment_upload_counter.labels(path="token", result="failed").inc()
            return None

        try:
            token = extract_token(r.json())
        except ValueError:
            token = None
        attachment_upload_counter.labels(path="token", result="ok" if token else "failed").inc()
        return token

    async def upload_to_record(
        self,
        record_id: str,
        field: str,
        data: bytes,
        content_type: str,
        filename: str,
    ) -> UploadResult:
        """Attach raw bytes (base64) to a field of an existing record. Never raises on API failure."""
        self.config.require("api_key", "base_id")
        url = (
            f"{self.config.content_url}/v0/{self.config.base_id}/{record_id}/"
            f"{quote(field, safe='')}/uploadAttachment"
        )
        body = {
            "contentType": content_type,
            "file": base64.b64encode(data).decode("ascii"),
            "filename": filename,
        }

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                r = await client.post(url, headers=self.config.auth_headers(), json=body)
        except httpx.HTTPError as e:
            logger.error("direct_upload_error", record_id=record_id, filename=filename, error=str(e))
            attachment_upload_counter.labels(path="direct", result="failed").inc()
            return UploadResult(ok=False)

        if not r.is_success:
            logger.error("direct_upload_failed", record_id=record_id, status=r.status_code, body=r.text)
            attachment_upload_counter.labels(path="direct", result="failed").inc()
            return UploadResult(ok=False, status=r.status_code, body=r.text)

        attachment_upload_counter.labels(path="direct", result="ok").inc()
        return UploadResult(ok=True, status=r.status_code)
