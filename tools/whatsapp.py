import httpx
from dataclasses import dataclass
from typing import Any, Dict, Optional
from loguru import logger


@dataclass
class SendResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[Any] = None


class WhatsAppSender:
    """Sends text replies through the WhatsApp Cloud API."""

    def __init__(self, api_url: str, access_token: Optional[str], phone_number_id: Optional[str],
                 timeout: float = 20.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_url = api_url.rstrip("/")
        self.access_token = access_token
        self.phone_number_id = phone_number_id
        self.timeout = timeout
        self.transport = transport

        if not self.access_token or not self.phone_number_id:
            logger.warning("WhatsApp access token or phone number id missing, sends will be rejected")

    @property
    def messages_url(self) -> str:
        return f"{self.api_url}/{self.phone_number_id}/messages"

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json"
        }

    async def send_message(self, to: str, body: str) -> SendResult:
        """
        Send a text message to one recipient.

        Failures are logged and reported in the result, never raised.
        """
        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": to,
            "type": "text",
            "text": {"body": body}
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.messages_url, headers=self._get_headers(), json=payload)
                response.raise_for_status()

        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            logger.error(f"Error sending WhatsApp message to {to}: {detail}")
            return SendResult(success=False, error=detail)
        except httpx.TimeoutException as e:
            logger.error(f"Timed out sending WhatsApp message to {to} after {self.timeout}s: {e}")
            return SendResult(success=False, error="timeout")
        except Exception as e:
            logger.error(f"Error sending WhatsApp message to {to}: {e}")
            return SendResult(success=False, error=str(e))

        message_id = _message_id(response)
        logger.info(f"Message sent successfully to {to}: {message_id}")
        return SendResult(success=True, message_id=message_id)


def _error_detail(response: httpx.Response) -> Any:
    """Prefer the platform's JSON error body over the bare status line."""
    try:
        return response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"


def _message_id(response: httpx.Response) -> Optional[str]:
    """Id of the sent message; the send already succeeded, so a bad body only loses the id."""
    try:
        data = response.json()
        return data["messages"][0]["id"]
    except (ValueError, KeyError, IndexError, TypeError):
        logger.warning(f"Could not read message id from WhatsApp response: {response.text[:200]!r}")
        return None
