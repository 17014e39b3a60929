import asyncio
from typing import List, Optional
from langgraph.graph import StateGraph, START, END
from loguru import logger

from graph.state import InboundMessage, MessageState
from graph.services import Services
from graph.nodes.detect import detect
from graph.nodes.reply import reply
from graph.nodes.score import score, is_qualified
from graph.nodes.send import send
from graph.nodes.record import record


def build_workflow():
    """Build the per-message relay workflow."""
    workflow = StateGraph(MessageState)

    # Add nodes
    workflow.add_node("detect", detect)
    workflow.add_node("reply", reply)
    workflow.add_node("score", score)
    workflow.add_node("send", send)
    workflow.add_node("record", record)

    # Add edges
    workflow.add_edge(START, "detect")
    workflow.add_edge("detect", "reply")
    workflow.add_edge("reply", "score")
    workflow.add_edge("score", "send")

    def record_decision(state: MessageState) -> str:
        if is_qualified(state.get("score", 0)):
            logger.info(f"Qualified lead, recording: {state['score']}")
            return "record"
        return "skip"

    workflow.add_conditional_edges("send", record_decision, {"record": "record", "skip": END})
    workflow.add_edge("record", END)

    return workflow.compile()


app_graph = build_workflow()


class MessagePipeline:
    """Runs the relay workflow for each inbound message with injected services."""

    def __init__(self, services: Services, compiled_graph=None):
        self.services = services
        self.graph = compiled_graph or app_graph

    async def process(self, message: InboundMessage) -> Optional[MessageState]:
        """Process one message. Never raises; failures are logged and return None."""
        logger.info(f"Message from {message.sender_name} ({message.sender}): {message.text}")
        try:
            result = await self.graph.ainvoke(
                {"message": message, "errors": []},
                config={"configurable": {"services": self.services}}
            )
        except Exception:
            logger.exception(f"Error processing message {message.message_id} from {message.sender}")
            return None

        if result.get("errors"):
            logger.warning(f"Message {message.message_id} finished with errors: {result['errors']}")
        return result

    async def process_all(self, messages: List[InboundMessage]) -> List[Optional[MessageState]]:
        """Process every message of one delivery concurrently."""
        return list(await asyncio.gather(*(self.process(m) for m in messages)))
