# Services package for the onboarding intake

from .airtable_client import AirtableRecordStore
from .airtable_schema import AirtableSchemaClient
from .airtable_upload import AttachmentUploader
from .submission import SubmissionService
from .webhooks import WebhookNotifier

__all__ = [
    "AirtableRecordStore",
    "AirtableSchemaClient",
    "AttachmentUploader",
    "SubmissionService",
    "WebhookNotifier",
]
