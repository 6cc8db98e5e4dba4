from __future__ import annotations

"""
FastAPI application for the deal-finder WhatsApp bot.

- GET  /webhook    Meta webhook verification handshake
- POST /webhook    incoming WhatsApp messages -> matched deals -> reply
- GET  /health     service status as JSON
- GET  /ready      503 until the catalog is loaded
- GET  /chat-link  wa.me link that opens a chat with the bot
- GET  /qr         QR code (SVG) of the chat link
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from .config import (
    CHAT_LINK_MESSAGE,
    SERVICE_NAME,
    SERVICE_VERSION,
    CatalogEntry,
    ChatLinkResponse,
    HealthResponse,
    ServiceStatuses,
    get_verify_token,
    get_whatsapp_credentials,
    get_whatsapp_number,
)
from ._singletons import get_catalog
from .matching import find_matches
from .responses import ResponseTemplates, is_greeting
from .whatsapp import build_chat_link, phone_digits, render_qr_svg, send_whatsapp_message


# -----------------------
# Webhook payload models
# -----------------------

class _Lenient(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class TextBody(_Lenient):
    body: str = ""


class WhatsAppMessage(_Lenient):
    sender: str = Field("", alias="from")
    id: str = ""
    timestamp: str = ""
    type: str = ""
    text: Optional[TextBody] = None


class ChangeValue(_Lenient):
    messages: Optional[List[WhatsAppMessage]] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class Change(_Lenient):
    value: ChangeValue = Field(default_factory=ChangeValue)


class Entry(_Lenient):
    changes: List[Change] = Field(default_factory=list)


class WebhookPayload(_Lenient):
    entry: List[Entry] = Field(default_factory=list)


def first_text_message(payload: WebhookPayload) -> Optional[WhatsAppMessage]:
    """First message of the first change of the first entry, if it is text."""
    if not payload.entry or not payload.entry[0].changes:
        return None
    messages = payload.entry[0].changes[0].value.messages
    if not messages:
        return None
    message = messages[0]
    if message.type != "text" or message.text is None:
        return None
    return message


# -----------------------
# Reply building
# -----------------------

def handle_incoming_text(
    text: str,
    catalog: Sequence[CatalogEntry],
    templates: ResponseTemplates,
) -> str:
    if is_greeting(text):
        return templates.welcome_message()
    deals = find_matches(text, catalog)
    logger.info("Query matched {} deals", len(deals))
    return templates.format_deals(deals)


# -----------------------
# FastAPI app + startup
# -----------------------

app = FastAPI(title=SERVICE_NAME, version=SERVICE_VERSION)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_STARTED_AT = time.monotonic()
templates = ResponseTemplates()


def _load_catalog() -> Optional[Tuple[CatalogEntry, ...]]:
    # get_catalog caches a successful load; failures are retried next call
    try:
        return get_catalog()
    except (FileNotFoundError, ValueError) as e:
        logger.error("Catalog unavailable: {}", e)
        return None


@app.on_event("startup")
def startup_event() -> None:
    logger.info("Starting dealbot...")
    catalog = _load_catalog()
    if catalog is not None:
        logger.info("Loaded catalog with {} deals", len(catalog))
    token, phone_id = get_whatsapp_credentials()
    if not token or not phone_id:
        logger.warning("WhatsApp credentials not set; replies will fail to send.")
    logger.info("Startup complete.")


@app.get("/webhook", response_class=PlainTextResponse)
def verify_webhook(
    mode: Optional[str] = Query(None, alias="hub.mode"),
    token: Optional[str] = Query(None, alias="hub.verify_token"),
    challenge: Optional[str] = Query(None, alias="hub.challenge"),
) -> str:
    expected = get_verify_token()
    if mode == "subscribe" and expected is not None and token == expected:
        logger.info("Webhook verified successfully!")
        return challenge or ""
    logger.warning("Webhook verification failed - token mismatch")
    raise HTTPException(status_code=403, detail="Forbidden")


@app.post("/webhook", response_class=PlainTextResponse)
def receive_webhook(payload: Optional[Dict[str, Any]] = Body(None)) -> str:
    """
    Always answers 200 "OK": the platform redelivers anything else, and a
    failed reply should not turn into a stream of duplicate messages.
    """
    try:
        message = first_text_message(WebhookPayload.model_validate(payload or {}))
        if message is None:
            return "OK"

        catalog = _load_catalog()
        if catalog is None:
            logger.error("Dropping message: catalog not loaded")
            return "OK"

        reply = handle_incoming_text(message.text.body, catalog, templates)
        send_whatsapp_message(message.sender, reply)
    except Exception as e:
        logger.exception("Webhook error: {}", e)
    return "OK"


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    started = time.perf_counter()

    catalog = _load_catalog()
    token, phone_id = get_whatsapp_credentials()
    services = ServiceStatuses(
        catalog="operational" if catalog is not None else "down",
        messaging="operational" if token and phone_id else "degraded",
    )
    overall = "operational"
    if services.catalog == "down":
        overall = "degraded"

    elapsed = int(time.monotonic() - _STARTED_AT)
    return HealthResponse(
        status=overall,
        uptime=f"{elapsed // 3600}h {(elapsed % 3600) // 60}m",
        response_time_ms=round((time.perf_counter() - started) * 1000, 3),
        timestamp=datetime.now(timezone.utc).isoformat(),
        services=services,
        catalog_size=len(catalog) if catalog is not None else 0,
    )


@app.get("/ready", response_class=PlainTextResponse)
def ready() -> str:
    if _load_catalog() is None:
        raise HTTPException(status_code=503, detail="Catalog not loaded")
    return "OK"


@app.get("/chat-link", response_model=ChatLinkResponse)
def chat_link() -> ChatLinkResponse:
    number = get_whatsapp_number()
    return ChatLinkResponse(
        whatsapp_url=build_chat_link(number, CHAT_LINK_MESSAGE),
        phone_number=phone_digits(number),
        message=CHAT_LINK_MESSAGE,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@app.get("/qr")
def qr_code() -> Response:
    svg = render_qr_svg(build_chat_link(get_whatsapp_number(), CHAT_LINK_MESSAGE))
    return Response(content=svg, media_type="image/svg+xml")
