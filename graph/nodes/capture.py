from typing import Any, Dict, List
from graph.state import InboundMessage
from loguru import logger


def is_recognized_delivery(payload: Any) -> bool:
    """A delivery is ours to acknowledge when it carries the top-level 'object' marker."""
    return isinstance(payload, dict) and bool(payload.get("object"))


def extract_messages(payload: Dict[str, Any]) -> List[InboundMessage]:
    """
    Pull chat messages out of a WhatsApp webhook delivery.

    Only entry[0].changes[0].value is read. A missing or malformed path
    yields no messages instead of raising.
    """
    try:
        value = payload["entry"][0]["changes"][0]["value"]
        raw_messages = value.get("messages") or []
        contacts = value.get("contacts") or []
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        logger.info(f"Delivery has no messages ({type(e).__name__}: {e})")
        return []

    if not isinstance(raw_messages, list):
        logger.warning(f"Ignoring non-list messages field: {raw_messages!r}")
        return []
    if not isinstance(contacts, list):
        logger.warning(f"Ignoring non-list contacts field: {contacts!r}")
        contacts = []

    contact_name = None
    try:
        contact_name = contacts[0]["profile"]["name"]
    except (KeyError, IndexError, TypeError):
        pass
    if not isinstance(contact_name, str):
        contact_name = None

    messages = []
    for raw in raw_messages:
        if not isinstance(raw, dict) or not raw.get("from"):
            logger.warning(f"Skipping message without a sender: {raw!r}")
            continue

        sender = str(raw["from"])
        text = raw.get("text") if isinstance(raw.get("text"), dict) else {}
        body = text.get("body")
        messages.append(InboundMessage(
            sender=sender,
            text=body if isinstance(body, str) else "",
            message_id=raw.get("id"),
            sender_name=contact_name or sender
        ))

    return messages
