import asyncio
import json
import socket
from dataclasses import dataclass
from typing import Any, Optional

import httplib2
from google_auth_httplib2 import AuthorizedHttp
from loguru import logger

from graph.state import LeadRecord

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


@dataclass
class RecordResult:
    success: bool
    skipped: bool = False
    updated_range: Optional[str] = None
    error: Optional[str] = None


def load_credentials(credentials_json: Optional[str]) -> Any:
    """Service-account credentials from JSON, or None when missing or unusable."""
    if not credentials_json:
        logger.warning("No Google credentials provided, leads will only be logged")
        return None

    try:
        from google.oauth2 import service_account

        info = json.loads(credentials_json)
        return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    except json.JSONDecodeError as e:
        logger.error(f"Error parsing GOOGLE_CREDENTIALS JSON: {e}")
    except Exception as e:
        logger.error(f"Google Sheets authentication failed: {e}")
    logger.warning("Google Sheets logging disabled")
    return None


def build_sheets_service(credentials: Any) -> Any:
    """Build a Sheets v4 service, or None without credentials."""
    if credentials is None:
        return None

    try:
        from googleapiclient.discovery import build

        service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        logger.info("Google Sheets service initialized successfully")
        return service
    except Exception as e:
        logger.error(f"Google Sheets service build failed: {e}")
        logger.warning("Google Sheets logging disabled")
        return None


class LeadSheetWriter:
    """Appends qualified leads to a Google Sheet."""

    def __init__(self, service: Any, spreadsheet_id: Optional[str],
                 range_name: str = "Leads!A:G", timeout: float = 20.0, credentials: Any = None):
        self.service = service
        self.spreadsheet_id = spreadsheet_id
        self.range_name = range_name
        self.timeout = timeout
        self.credentials = credentials

    @classmethod
    def from_credentials_json(cls, credentials_json: Optional[str], spreadsheet_id: Optional[str],
                              range_name: str = "Leads!A:G", timeout: float = 20.0) -> "LeadSheetWriter":
        credentials = load_credentials(credentials_json)
        return cls(
            service=build_sheets_service(credentials),
            spreadsheet_id=spreadsheet_id,
            range_name=range_name,
            timeout=timeout,
            credentials=credentials
        )

    @property
    def configured(self) -> bool:
        return self.service is not None and bool(self.spreadsheet_id)

    async def record_lead(self, record: LeadRecord) -> RecordResult:
        """
        Append one lead row.

        Rows are never de-duplicated: recording the same lead twice
        appends two rows.
        """
        if not self.configured:
            logger.warning("Google Sheets not configured. Lead data logged instead.")
            logger.info(f"Lead: {record.sender_name} ({record.phone}), Score: {record.score}, "
                        f"Language: {record.language.value}")
            return RecordResult(success=False, skipped=True)

        try:
            result = await asyncio.wait_for(
                asyncio.to_thread(self._append_row, record.as_row()),
                timeout=self.timeout
            )
            updated_range = (result or {}).get("updates", {}).get("updatedRange")
            logger.info(f"Lead saved to Google Sheets: {record.sender_name} ({updated_range})")
            return RecordResult(success=True, updated_range=updated_range)

        except (asyncio.TimeoutError, socket.timeout):
            logger.error(f"Google Sheets append timed out after {self.timeout}s for {record.phone}")
            return RecordResult(success=False, error="timeout")
        except Exception as e:
            logger.error(f"Error saving to Google Sheets: {e}")
            return RecordResult(success=False, error=str(e))

    def _request_http(self) -> Optional[AuthorizedHttp]:
        # httplib2.Http is not thread-safe; each append gets its own.
        if self.credentials is None:
            return None
        return AuthorizedHttp(self.credentials, http=httplib2.Http(timeout=self.timeout))

    def _append_row(self, row: list) -> dict:
        request = self.service.spreadsheets().values().append(
            spreadsheetId=self.spreadsheet_id,
            range=self.range_name,
            valueInputOption="USER_ENTERED",
            insertDataOption="INSERT_ROWS",
            body={"values": [row]}
        )
        http = self._request_http()
        return request.execute(http=http) if http is not None else request.execute()
