from langchain_core.runnables import RunnableConfig
from graph.services import services_from
from graph.state import LeadRecord, MessageState, utc_timestamp


async def record(state: MessageState, config: RunnableConfig) -> MessageState:
    """Persist a qualified lead to the sheet."""
    message = state["message"]
    store = services_from(config).store

    lead = LeadRecord(
        timestamp=utc_timestamp(),
        sender_name=message.sender_name,
        phone=message.sender,
        message=message.text,
        reply=state["reply"],
        score=state["score"],
        language=state["language"]
    )
    result = await store.record_lead(lead)

    update = {"recorded": result.success}
    if result.error:
        update["errors"] = [f"record_failed: {result.error}"]
    return update
