from typing import Optional
from fastapi import BackgroundTasks, FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger
from dotenv import load_dotenv

from config import Settings
from graph.nodes.capture import extract_messages, is_recognized_delivery
from graph.services import Services, build_services
from graph.state import utc_timestamp
from graph.workflow import MessagePipeline

# Load environment variables
load_dotenv()


def configure_logging(settings: Settings) -> None:
    if settings.log_file:
        logger.add(settings.log_file, rotation="1 day", retention="7 days", level=settings.log_level)


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """Build the webhook app around explicitly constructed services."""
    settings = settings or Settings()
    services = services or build_services(settings)
    pipeline = MessagePipeline(services)

    app = FastAPI(
        title="WhatsApp Lead Relay",
        description="AI replies and lead qualification for WhatsApp messages",
        version="1.0.0"
    )
    app.state.settings = settings
    app.state.pipeline = pipeline

    @app.get("/webhook")
    def verify_webhook(
        mode: Optional[str] = Query(default=None, alias="hub.mode"),
        token: Optional[str] = Query(default=None, alias="hub.verify_token"),
        challenge: str = Query(default="", alias="hub.challenge"),
    ):
        """Answer the platform's subscription handshake."""
        if not (mode and token):
            return PlainTextResponse("Bad Request", status_code=400)

        if mode == "subscribe" and settings.webhook_verify_token and token == settings.webhook_verify_token:
            logger.info("WEBHOOK_VERIFIED")
            return PlainTextResponse(challenge, status_code=200)

        logger.warning(f"Webhook verification rejected (mode={mode})")
        return PlainTextResponse("Forbidden", status_code=403)

    @app.post("/webhook")
    async def receive_webhook(req: Request, background_tasks: BackgroundTasks):
        """
        Acknowledge a webhook delivery and process its messages.

        Expected payload:
        {
            "object": "whatsapp_business_account",
            "entry": [{"changes": [{"value": {
                "contacts": [{"profile": {"name": "Asha"}, "wa_id": "911234567890"}],
                "messages": [{"from": "911234567890", "id": "wamid...", "text": {"body": "Hi"}}]
            }}]}]
        }
        """
        try:
            payload = await req.json()
        except ValueError as e:
            logger.warning(f"Webhook body is not JSON: {e}")
            payload = None

        if not is_recognized_delivery(payload):
            return PlainTextResponse("Not Found", status_code=404)

        messages = extract_messages(payload)
        if messages:
            logger.info(f"Received {len(messages)} message(s)")
            background_tasks.add_task(pipeline.process_all, messages)

        return PlainTextResponse("EVENT_RECEIVED", status_code=200)

    @app.get("/health")
    def health():
        """Health check endpoint."""
        return {
            "status": "Server is running",
            "timestamp": utc_timestamp(),
            "webhook": "Ready"
        }

    # Error handlers
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"status": "error", "message": "Internal server error"}
        )

    return app


settings = Settings()
configure_logging(settings)
app = create_app(settings)

if __name__ == "__main__":
    import uvicorn

    logger.info(f"WhatsApp lead relay started on http://localhost:{settings.port}")
    logger.info("Webhook URL: /webhook")
    logger.info("Health check: /health")

    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=settings.port,
        log_level="info"
    )
