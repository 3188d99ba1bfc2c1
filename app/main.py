# Entry point for the FastAPI app
from fastapi import FastAPI, Request, HTTPException, Query
from fastapi.responses import PlainTextResponse, Response
import json
import logging
from typing import Optional

from . import config, conversation_log, security
from .adapters import get_adapter_for_channel
from .answer_service import AnswerService, build_answer_service
from .log_setup import configure_logging
from .message_handler import handle_incoming
from .models.unified_message import MessageType

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI()

# Built on startup (or first request) and shared by every request
answer_service: Optional[AnswerService] = None


def get_answer_service() -> AnswerService:
    global answer_service
    if answer_service is None:
        answer_service = build_answer_service()
    return answer_service


@app.on_event("startup")
async def startup_event():
    conversation_log.init_conversation_log_db()
    removed = conversation_log.cleanup_old_messages(config.CONVERSATION_LOG_RETENTION_DAYS)
    logger.info(f"[STARTUP] Conversation log ready ({removed} old messages removed)")

    service = get_answer_service()
    try:
        await service.knowledge_base.load()
    except Exception as e:
        # No content to serve: refuse to start rather than run broken
        logger.critical(f"[STARTUP] Failed to load knowledge base: {e}")
        raise

    logger.info("[STARTUP] Initialization complete")


@app.get("/")
def root():
    service = get_answer_service()
    return {
        "status": "ok",
        "knowledge_base": service.knowledge_base.state.value,
        "chunks": service.knowledge_base.chunk_count,
    }


@app.get("/webhook")
def verify_webhook(
    mode: Optional[str] = Query(None, alias="hub.mode"),
    token: Optional[str] = Query(None, alias="hub.verify_token"),
    challenge: Optional[str] = Query(None, alias="hub.challenge"),
):
    """Meta dashboard verification handshake."""
    result = security.verify_subscription(mode, token, challenge)
    if result is None:
        return Response(status_code=403)
    return PlainTextResponse(result)


@app.post("/webhook")
async def whatsapp_webhook(request: Request):
    """Inbound WhatsApp Cloud API messages.

    Once the payload is authentic the request is always acknowledged with 200,
    even when processing fails, so the platform does not redeliver it.
    """
    body = await request.body()
    if not security.verify_signature(body, request.headers.get("X-Hub-Signature-256")):
        security.log_security_event(
            "invalid_signature",
            security.get_client_ip(request),
            {"reason": "X-Hub-Signature-256 mismatch"},
            severity="ERROR",
        )
        raise HTTPException(status_code=403, detail="Invalid signature")

    try:
        data = json.loads(body)
    except ValueError:
        logger.error(f"[WEBHOOK] Could not parse request body: {body[:200]!r}")
        return {"status": "ignored"}

    adapter = get_adapter_for_channel("whatsapp")
    message = await adapter.parse_incoming(data) if isinstance(data, dict) else None
    if message is None:
        return {"status": "ignored"}

    if message.message_type != MessageType.TEXT or not message.content.strip():
        logger.info(f"[WEBHOOK] Ignoring {message.message_type.value} message from {message.user_id}")
        return {"status": "ignored"}

    try:
        await handle_incoming(message, adapter, get_answer_service())
    except Exception as e:
        logger.exception(f"[WEBHOOK] Error handling message from {message.user_id}: {e}")

    return {"status": "ok"}


@app.post("/bridge/message")
async def bridge_message(request: Request):
    """Inbound messages from the QR-paired client bridge; the reply is returned inline."""
    try:
        data = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Body must be JSON")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Body must be a JSON object")

    security.validate_bridge_auth(request, data)

    adapter = get_adapter_for_channel("bridge")
    message = await adapter.parse_incoming(data)
    if message is None or not message.content.strip():
        return {"status": "ignored", "reply": None}

    reply = await handle_incoming(message, adapter, get_answer_service())
    return {"status": "ok", "reply": reply}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
