import json
import os

os.environ.setdefault("ENVIRONMENT", "local")

import httpx
import pytest
from fastapi.testclient import TestClient

from onboard.core.settings import Settings
from onboard.dependencies import build_submission_service, get_submission_service
from onboard.main import app

API = "api.airtable.test"
CONTENT = "content.airtable.test"
HOOKS = "hooks.test"
BASE_ID = "appBASE"
TABLE = "Client Intake"


class FakeAirtable:
    """
    In-memory stand-in voor Airtable + de twee webhooks, via httpx.MockTransport.

    Elke request wordt bewaard in `self.requests`; status/body per endpoint zijn
    per test aan te passen.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.create_status = 200
        self.create_body = {"id": "rec1", "createdTime": "2025-01-01T00:00:00.000Z", "fields": {"Company Name": "Acme"}}
        self.token_status = {"primary": 200, "fallback": 200}
        self.token_body = {"id": "att1"}
        # per-call bodies (FIFO); leeg -> token_body
        self.token_queue: list[dict] = []
        self.schema_status = 200
        self.schema_body = {
            "tables": [
                {
                    "id": "tblINTAKE",
                    "name": TABLE,
                    "fields": [
                        {"id": "fldNAME", "name": "Company Name", "type": "singleLineText"},
                        {"id": "fldATTACH", "name": "Attachments", "type": "multipleAttachments"},
                    ],
                }
            ]
        }
        self.fetch_status = 200
        self.fetch_body = {
            "id": "rec1",
            "createdTime": "2025-01-01T00:00:00.000Z",
            "fields": {"Company Name": "Acme", "Attachments": [{"id": "att1", "url": "https://dl/att1"}]},
        }
        self.direct_status = 200
        self.webhook_status = {"primary": 200, "secondary": 200}
        self.webhook_down: set[str] = set()

    # --- helpers voor asserts ---
    def calls(self, kind: str) -> list[httpx.Request]:
        return [r for r in self.requests if self.classify(r) == kind]

    def json_of(self, request: httpx.Request):
        return json.loads(request.content)

    @staticmethod
    def classify(request: httpx.Request) -> str:
        host, path, method = request.url.host, request.url.path, request.method
        if host == HOOKS:
            return f"webhook:{path.strip('/')}"
        if host == CONTENT and path.endswith("/uploadAttachment"):
            return "direct"
        if path == f"/v0/bases/{BASE_ID}/attachments":
            return "token:primary"
        if path == f"/v0/{BASE_ID}/attachments":
            return "token:fallback"
        if path == f"/v0/meta/bases/{BASE_ID}/tables":
            return "schema"
        if path == f"/v0/{BASE_ID}/{TABLE}" and method == "POST":
            return "create"
        if path.startswith(f"/v0/{BASE_ID}/{TABLE}/") and method == "GET":
            return "fetch"
        return "unknown"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        kind = self.classify(request)

        if kind.startswith("webhook:"):
            target = kind.split(":", 1)[1]
            if target in self.webhook_down:
                raise httpx.ConnectError("webhook unreachable", request=request)
            return httpx.Response(self.webhook_status[target], json={"received": True})
        if kind.startswith("token:"):
            status = self.token_status[kind.split(":", 1)[1]]
            if status != 200:
                body = {"error": "NOT_FOUND"}
            else:
                body = self.token_queue.pop(0) if self.token_queue else self.token_body
            return httpx.Response(status, json=body)
        if kind == "schema":
            return httpx.Response(self.schema_status, json=self.schema_body)
        if kind == "create":
            if self.create_status != 200:
                return httpx.Response(self.create_status, json={"error": {"type": "INVALID_REQUEST"}})
            return httpx.Response(200, json=self.create_body)
        if kind == "fetch":
            return httpx.Response(self.fetch_status, json=self.fetch_body)
        if kind == "direct":
            return httpx.Response(self.direct_status, json={"id": "rec1"})
        return httpx.Response(404, json={"error": "unknown route"})


@pytest.fixture
def anyio_backend():
    # Dwing anyio om alleen asyncio te gebruiken (geen Trio nodig)
    return "asyncio"


@pytest.fixture
def fake_airtable():
    return FakeAirtable()


@pytest.fixture
def transport(fake_airtable):
    return httpx.MockTransport(fake_airtable.handler)


@pytest.fixture
def test_settings():
    return Settings(
        airtable_api_key="keyTEST",
        airtable_base_id=BASE_ID,
        airtable_table_name=TABLE,
        airtable_attachments_mode="attachment",
        airtable_api_url=f"https://{API}",
        airtable_content_url=f"https://{CONTENT}",
        n8n_webhook_url=f"https://{HOOKS}/primary",
        n8n_form_webhook_url=f"https://{HOOKS}/secondary",
    )


@pytest.fixture
def airtable_config(test_settings):
    return test_settings.airtable_config()


@pytest.fixture
def client(test_settings, transport):
    app.dependency_overrides[get_submission_service] = lambda: build_submission_service(
        test_settings, transport=transport
    )
    yield TestClient(app)
    app.dependency_overrides.clear()
