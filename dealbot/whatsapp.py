from __future__ import annotations

from io import BytesIO
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
import segno
from loguru import logger

from .config import (
    GRAPH_API_BASE,
    GRAPH_API_VERSION,
    HTTP_CONNECT_TIMEOUT,
    HTTP_READ_TIMEOUT,
    HTTP_USER_AGENT,
    QR_BORDER,
    QR_ERROR_LEVEL,
    QR_SCALE,
    get_whatsapp_credentials,
)


class WhatsAppError(RuntimeError):
    """Base error for outbound WhatsApp messaging."""


class WhatsAppConfigError(WhatsAppError):
    """Token or phone number id is not configured."""


class WhatsAppSendError(WhatsAppError):
    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"WhatsApp API error ({status_code}): {body}")


def build_message_payload(to: str, message: str) -> Dict[str, Any]:
    return {
        "messaging_product": "whatsapp",
        "to": to,
        "text": {"body": message},
    }


def send_whatsapp_message(
    to: str,
    message: str,
    client: Optional[httpx.Client] = None,
) -> None:
    """
    Send a plain text message through the WhatsApp Cloud API.

    Raises WhatsAppConfigError when credentials are missing and
    WhatsAppSendError on any non-2xx answer. Network errors from httpx
    propagate unchanged.
    """
    token, phone_id = get_whatsapp_credentials()
    if not token or not phone_id:
        raise WhatsAppConfigError("Missing WhatsApp configuration")

    url = f"{GRAPH_API_BASE}/{GRAPH_API_VERSION}/{phone_id}/messages"
    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "User-Agent": HTTP_USER_AGENT,
    }
    payload = build_message_payload(to, message)

    if client is None:
        with httpx.Client(
            timeout=httpx.Timeout(HTTP_READ_TIMEOUT, connect=HTTP_CONNECT_TIMEOUT),
        ) as owned:
            r = owned.post(url, json=payload, headers=headers)
    else:
        r = client.post(url, json=payload, headers=headers)

    if r.status_code >= 300:
        raise WhatsAppSendError(r.status_code, r.text)
    logger.info("Sent WhatsApp reply ({} chars)", len(message))


def phone_digits(number: str) -> str:
    """Strip the "whatsapp:" scheme and leading "+" from a sender number."""
    return number.replace("whatsapp:", "").strip().lstrip("+")


def build_chat_link(number: str, message: str) -> str:
    """wa.me deep link that opens a chat with ``message`` prefilled."""
    text = quote(message, safe="!'()*")
    return f"https://wa.me/{phone_digits(number)}?text={text}"


def render_qr_svg(url: str) -> str:
    """Inline SVG (no XML declaration) of a QR code that encodes ``url``."""
    qr = segno.make(url, error=QR_ERROR_LEVEL, micro=False)
    out = BytesIO()
    qr.save(out, kind="svg", scale=QR_SCALE, border=QR_BORDER, xmldecl=False)
    return out.getvalue().decode("utf-8")
