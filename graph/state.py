import operator
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, List, Optional, TypedDict


class Language(str, Enum):
    """Languages the relay can detect and answer in."""
    EN = "en"
    HI = "hi"
    KN = "kn"
    TA = "ta"
    TE = "te"


@dataclass
class InboundMessage:
    """One chat message extracted from a webhook delivery."""
    sender: str
    text: str
    message_id: Optional[str]
    sender_name: str


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class LeadRecord:
    """A qualified interaction, appended as one sheet row."""
    timestamp: str
    sender_name: str
    phone: str
    message: str
    reply: str
    score: int
    language: Language

    def as_row(self) -> list:
        return [
            self.timestamp,
            self.sender_name,
            self.phone,
            self.message,
            self.reply,
            self.score,
            self.language.value,
        ]


class MessageState(TypedDict, total=False):
    """State shape for the per-message workflow."""
    message: InboundMessage
    language: Language
    reply: str
    reply_fallback: bool             # True when the fixed fallback text was used
    score: int
    sent: bool
    sent_message_id: Optional[str]   # WhatsApp id of our reply
    recorded: bool
    errors: Annotated[List[str], operator.add]
