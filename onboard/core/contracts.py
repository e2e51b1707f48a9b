from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Tuple

from onboard.core.errors import ConfigurationError
from onboard.schemas.intake import IntakePayload


@dataclass(frozen=True)
class AirtableConfig:
    api_key: Optional[str]
    base_id: Optional[str]
    table_name: Optional[str]
    attachments_mode: str = "attachment"
    api_url: str = "https://api.airtable.com"
    content_url: str = "https://content.airtable.com"

    @property
    def is_complete(self) -> bool:
        return bool(self.api_key and self.base_id and self.table_name)

    def require(self, *names: str) -> None:
        """Raise ConfigurationError for the first missing value (api_key, base_id, table_name)."""
        env_names = {
            "api_key": "AIRTABLE_API_KEY",
            "base_id": "AIRTABLE_BASE_ID",
            "table_name": "AIRTABLE_TABLE_NAME",
        }
        for name in names or tuple(env_names):
            if not getattr(self, name):
                raise ConfigurationError(env_names[name])

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}


@dataclass(frozen=True)
class WebhookConfig:
    primary_url: str
    secondary_url: str


@dataclass(frozen=True)
class AirtableRecord:
    id: str
    created_time: Optional[str] = None
    fields: Optional[Dict[str, Any]] = None
    # JSON zoals Airtable het stuurde, incl. onbekende keys
    raw: Optional[Dict[str, Any]] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_json(cls, data: Any) -> Optional["AirtableRecord"]:
        if not isinstance(data, dict) or not isinstance(data.get("id"), str):
            return None
        fields = data.get("fields")
        return cls(
            id=data["id"],
            created_time=data.get("createdTime"),
            fields=fields if isinstance(fields, dict) else None,
            raw=data,
        )

    def to_dict(self) -> Dict[str, Any]:
        if self.raw is not None:
            return self.raw
        out: Dict[str, Any] = {"id": self.id}
        if self.created_time is not None:
            out["createdTime"] = self.created_time
        if self.fields is not None:
            out["fields"] = self.fields
        return out


class CreateResponseKind(str, Enum):
    SINGLE = "single"
    BATCH = "batch"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class CreateResponse:
    """
    Antwoord van een create-call, één keer geclassificeerd:
    `{id, ...}` (single), `{records: [...]}` (batch) of iets anders (unknown).

    `records` bevat de record-objecten ongewijzigd; alleen het id wordt geparsed.
    """

    kind: CreateResponseKind
    raw: Any
    records: Tuple[Any, ...] = ()
    record_id: Optional[str] = None

    @classmethod
    def parse(cls, raw: Any) -> "CreateResponse":
        if isinstance(raw, dict) and isinstance(raw.get("records"), list):
            records = tuple(raw["records"])
            single_id = raw.get("id") if isinstance(raw.get("id"), str) else None
            first = AirtableRecord.from_json(records[0]) if records else None
            return cls(
                kind=CreateResponseKind.BATCH,
                raw=raw,
                records=records,
                record_id=single_id or (first.id if first else None),
            )

        single = AirtableRecord.from_json(raw)
        if single is not None:
            return cls(
                kind=CreateResponseKind.SINGLE,
                raw=raw,
                records=(raw,),
                record_id=single.id,
            )

        return cls(kind=CreateResponseKind.UNKNOWN, raw=raw)

    def records_for_webhook(self, fetched: Optional[AirtableRecord]) -> List[Any]:
        if fetched is not None:
            return [fetched.to_dict()]
        return list(self.records)


@dataclass(frozen=True)
class FieldRef:
    table_id: str
    field_id: str


@dataclass(frozen=True)
class UploadResult:
    ok: bool
    status: Optional[int] = None
    body: Optional[str] = None


@dataclass(frozen=True)
class WebhookResult:
    ok: bool
    status: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"ok": self.ok}
        if self.status is not None:
            out["status"] = self.status
        return out


@dataclass
class IncomingFile:
    """A file part read from a multipart submission, already renamed."""

    field: str
    original_name: str
    name: str
    content_type: str
    data: bytes = field(repr=False, default=b"")

    @property
    def size(self) -> int:
        return len(self.data)


class RecordStore(Protocol):
    async def create_record(self, payload: IntakePayload) -> CreateResponse: ...
    async def fetch_record(self, record_id: str) -> Optional[AirtableRecord]: ...
    async def find_field(self, table_name: str, field_name: str) -> Optional[FieldRef]: ...
