from __future__ import annotations

import os
from pathlib import Path
from typing import FrozenSet, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------
# Paths
# ---------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_DIR = PROJECT_ROOT / "data"
DEFAULT_CATALOG_PATH = DATA_DIR / "catalog.json"
CATALOG_PATH = Path(os.getenv("DEALBOT_CATALOG_PATH", str(DEFAULT_CATALOG_PATH)))


# ---------------------------
# Query text processing
# ---------------------------

MAX_INPUT_CHARS = 4_000  # WhatsApp caps a text body at 4096 chars

# Tokens shorter than this never become search terms
MIN_TERM_LENGTH = 3

# Greetings plus search-intent words; neither says anything about *what* to find.
STOP_WORDS: FrozenSet[str] = frozenset(
    {
        "hi",
        "hello",
        "hey",
        "find",
        "search",
        "looking",
        "want",
        "need",
        "near",
        "me",
        "bot",
    }
)


# ---------------------------
# Matching & ranking
# ---------------------------

# Catalog words shorter than this are skipped for fuzzy comparison
MIN_WORD_LENGTH = 3

EXACT_MATCH_SCORE = 1.0
FUZZY_WORD_THRESHOLD = 0.7    # a fuzzy word hit must beat this to count
ACCEPTANCE_THRESHOLD = 0.6    # an entry must beat this to be returned

MAX_RESULTS = 5


# ---------------------------
# Greeting detection / replies
# ---------------------------

GREETING_WORDS: FrozenSet[str] = frozenset({"hi", "hello", "hey", "start", "begin"})
GREETING_MAX_WORDS = 3

CHAT_LINK_MESSAGE = "Hi Bot, find coffee near me"


# ---------------------------
# WhatsApp Cloud API / webhook
# ---------------------------

GRAPH_API_BASE = "https://graph.facebook.com"
GRAPH_API_VERSION = os.getenv("WHATSAPP_GRAPH_VERSION", "v15.0")

DEFAULT_WHATSAPP_NUMBER = "whatsapp:+15556440448"

HTTP_CONNECT_TIMEOUT = 3.0
HTTP_READ_TIMEOUT = 10.0
HTTP_USER_AGENT = "dealbot/1.0"

# QR code for the chat link (module size and quiet zone, in SVG units)
QR_SCALE = 8
QR_BORDER = 2
QR_ERROR_LEVEL = "m"


def get_whatsapp_credentials() -> Tuple[Optional[str], Optional[str]]:
    """
    Return (token, phone_number_id) from the environment.

    Read on every call so a rotated token does not need a restart.
    """
    token = os.getenv("WHATSAPP_TOKEN") or None
    phone_id = os.getenv("WHATSAPP_PHONE_ID") or None
    return token, phone_id


def get_verify_token() -> Optional[str]:
    return os.getenv("WEBHOOK_VERIFY_TOKEN") or None


def get_whatsapp_number() -> str:
    return os.getenv("WHATSAPP_NUMBER") or DEFAULT_WHATSAPP_NUMBER


# ---------------------------
# Service metadata
# ---------------------------

SERVICE_NAME = "dealbot"
SERVICE_VERSION = "1.0.0"


# ---------------------------
# Pydantic models shared around the app
# ---------------------------

class CatalogEntry(BaseModel):
    """
    One deal in the catalog.

    Only name, category and description take part in matching; location and
    deal (the offer text) are carried for display. Unknown fields from the
    catalog file are kept as extras.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    id: int
    name: str
    category: str = ""
    description: str = ""
    location: str = ""
    deal: str = ""

    def searchable_text(self) -> str:
        return f"{self.name} {self.category} {self.description}".lower()


ServiceState = Literal["operational", "degraded", "down"]


class ServiceStatuses(BaseModel):
    api: ServiceState = "operational"
    catalog: ServiceState = "operational"
    webhook: ServiceState = "operational"
    messaging: ServiceState = "operational"


class HealthResponse(BaseModel):
    """
    Response body for GET /health.
    """

    status: ServiceState
    uptime: str
    response_time_ms: float = Field(ge=0)
    timestamp: str
    services: ServiceStatuses
    catalog_size: int = Field(ge=0)
    version: str = SERVICE_VERSION


class ChatLinkResponse(BaseModel):
    """
    Response body for GET /chat-link.
    """

    whatsapp_url: str
    phone_number: str
    message: str
    timestamp: str
