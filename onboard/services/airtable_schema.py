# onboard/services/airtable_schema.py
from typing import Any, Optional

import httpx
import structlog

from onboard.core.contracts import AirtableConfig, FieldRef

logger = structlog.get_logger(__name__)


class AirtableSchemaClient:
    """Resolves human field names to stable field ids via the meta API."""

    def __init__(self, config: AirtableConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    async def find_field(self, table_name: str, field_name: str) -> Optional[FieldRef]:
        """
        Zoek tabel en veld op exacte naam.

        Returns:
            FieldRef(table_id, field_id), of None als niets gevonden is of de call faalde
        """
        self.config.require("api_key", "base_id")

        url = f"{self.config.api_url}/v0/meta/bases/{self.config.base_id}/tables"
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                r = await client.get(url, headers=self.config.auth_headers())
        except httpx.HTTPError as e:
            logger.warning("schema_fetch_error", error=str(e))
            return None

        if not r.is_success:
            logger.error("schema_fetch_failed", status=r.status_code, body=r.text)
            return None

        try:
            data: Any = r.json()
        except ValueError:
            logger.error("schema_fetch_invalid_json")
            return None

        tables = data.get("tables") if isinstance(data, dict) else None
        if not isinstance(tables, list):
            return None
        for table in tables:
            if not isinstance(table, dict) or table.get("name") != table_name:
                continue
            fields = table.get("fields")
            for f in fields if isinstance(fields, list) else []:
                if not isinstance(f, dict) or f.get("name") != field_name:
                    continue
                table_id, field_id = table.get("id"), f.get("id")
                if isinstance(table_id, str) and isinstance(field_id, str):
                    return FieldRef(table_id=table_id, field_id=field_id)
                logger.warning("schema_field_without_id", table=table_name, field=field_name)
                return None
            return None
        return None
