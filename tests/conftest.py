"""Shared fixtures for the WhatsApp lead relay tests."""

import json
import os
import sys
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# No file sink during tests
os.environ["LOG_FILE"] = ""

from config import Settings
from graph.services import Services
from graph.state import InboundMessage
from tools.llm import CompletionClient
from tools.sheets import LeadSheetWriter
from tools.whatsapp import WhatsAppSender

VERIFY_TOKEN = "secret-token"
API_URL = "https://graph.test/v18.0"
PHONE_NUMBER_ID = "1122334455"


def completion_response(content):
    """Shape of an OpenAI chat completion, as far as the client reads it."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class WhatsAppRecorder:
    """httpx.MockTransport handler that records outbound sends."""

    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.body = body if body is not None else {"messages": [{"id": "wamid.OUT1"}]}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def payloads(self):
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def settings():
    return Settings(
        webhook_verify_token=VERIFY_TOKEN,
        whatsapp_api_url=API_URL,
        whatsapp_access_token="wa-token",
        phone_number_id=PHONE_NUMBER_ID,
        google_sheets_id="sheet-1",
        log_file=""
    )


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=completion_response("  Hello from Priyadarshini!  "))
    return client


@pytest.fixture
def whatsapp():
    return WhatsAppRecorder()


@pytest.fixture
def sheets_service():
    service = MagicMock()
    append = service.spreadsheets.return_value.values.return_value.append
    append.return_value.execute.return_value = {"updates": {"updatedRange": "Leads!A2:G2"}}
    return service


@pytest.fixture
def services(openai_client, whatsapp, sheets_service):
    return Services(
        llm=CompletionClient(client=openai_client),
        sender=WhatsAppSender(API_URL, "wa-token", PHONE_NUMBER_ID, transport=httpx.MockTransport(whatsapp)),
        store=LeadSheetWriter(service=sheets_service, spreadsheet_id="sheet-1")
    )


@pytest.fixture
def inbound_message():
    return InboundMessage(
        sender="911234567890",
        text="I need bulk agrotech mulch",
        message_id="m1",
        sender_name="Asha"
    )


def appended_rows(sheets_service):
    """Rows passed to values().append(...) on a mocked Sheets service."""
    append = sheets_service.spreadsheets.return_value.values.return_value.append
    return [c.kwargs["body"]["values"][0] for c in append.call_args_list]
