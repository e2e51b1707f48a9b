from __future__ import annotations

from typing import Optional

import httpx
from fastapi import Depends

from onboard.core.settings import Settings, get_settings
from onboard.services.airtable_client import AirtableRecordStore
from onboard.services.airtable_upload import AttachmentUploader
from onboard.services.submission import SubmissionService
from onboard.services.webhooks import WebhookNotifier


def build_submission_service(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SubmissionService:
    """Wire the clients from one explicit config snapshot."""
    airtable = settings.airtable_config()
    return SubmissionService(
        store=AirtableRecordStore(airtable, transport=transport),
        uploader=AttachmentUploader(airtable, transport=transport),
        notifier=WebhookNotifier(settings.webhook_config(), transport=transport),
        table_name=airtable.table_name,
    )


def get_submission_service(settings: Settings = Depends(get_settings)) -> SubmissionService:
    return build_submission_service(settings)
