from langchain_core.runnables import RunnableConfig
from graph.services import services_from
from graph.state import Language, MessageState
from loguru import logger


async def reply(state: MessageState, config: RunnableConfig) -> MessageState:
    """Get the AI reply for the customer message."""
    message = state["message"]
    llm = services_from(config).llm

    result = await llm.get_reply(message.text, state.get("language", Language.EN), message.sender_name)
    logger.info(f"AI response: {result.text}")

    update = {"reply": result.text, "reply_fallback": result.fallback}
    if result.error:
        update["errors"] = [f"completion_failed: {result.error}"]
    return update
