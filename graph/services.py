from dataclasses import dataclass
from typing import Optional
from langchain_core.runnables import RunnableConfig

from config import Settings
from tools.llm import CompletionClient
from tools.sheets import LeadSheetWriter
from tools.whatsapp import WhatsAppSender


@dataclass
class Services:
    """External clients shared by every message for the life of the process."""
    llm: CompletionClient
    sender: WhatsAppSender
    store: LeadSheetWriter


def build_services(settings: Settings) -> Services:
    """Construct the outbound clients once at startup."""
    return Services(
        llm=CompletionClient(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout=settings.http_timeout_seconds
        ),
        sender=WhatsAppSender(
            api_url=settings.whatsapp_api_url,
            access_token=settings.whatsapp_access_token,
            phone_number_id=settings.phone_number_id,
            timeout=settings.http_timeout_seconds
        ),
        store=LeadSheetWriter.from_credentials_json(
            settings.google_credentials,
            spreadsheet_id=settings.google_sheets_id,
            range_name=settings.google_sheets_range,
            timeout=settings.http_timeout_seconds
        )
    )


def services_from(config: Optional[RunnableConfig]) -> Services:
    """Pull the injected Services out of a workflow run config."""
    services = ((config or {}).get("configurable") or {}).get("services")
    if services is None:
        raise RuntimeError("Workflow run config has no 'services'")
    return services
