from langchain_core.runnables import RunnableConfig
from graph.services import services_from
from graph.state import MessageState


async def send(state: MessageState, config: RunnableConfig) -> MessageState:
    """Send the reply back to the customer over WhatsApp."""
    message = state["message"]
    sender = services_from(config).sender

    result = await sender.send_message(message.sender, state["reply"])

    update = {"sent": result.success, "sent_message_id": result.message_id}
    if not result.success:
        # The lead is still recorded below even though the customer got nothing.
        update["errors"] = [f"send_failed: {result.error}"]
    return update
