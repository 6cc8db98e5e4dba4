from __future__ import annotations
"""
Reply templating for the chat front-end.

Turns a ranked list of catalog entries into the WhatsApp text the user sees.
Which wording variant gets used is decided by an injectable ``chooser`` so
tests (or a future A/B setup) can pin it; nothing here keeps global state.
"""

import random
from enum import Enum
from typing import Callable, Dict, Sequence, Tuple

from loguru import logger

from .config import GREETING_MAX_WORDS, GREETING_WORDS, CatalogEntry
from .normalize import normalize_text


class MessageKind(str, Enum):
    GREETING = "greeting"
    NO_RESULTS = "no_results"
    CONTINUE = "continue"


MESSAGE_VARIANTS: Dict[MessageKind, Tuple[str, ...]] = {
    MessageKind.GREETING: (
        "Great choice! Here's what I found:",
        "Perfect! I've got some amazing deals for you:",
        "Awesome! Check out these fantastic offers:",
        "Excellent! Here are some deals you'll love:",
        "Nice! I found some great options:",
    ),
    MessageKind.NO_RESULTS: (
        "Hmm, I couldn't find exactly what you're looking for. How about trying some popular options like coffee, pizza, burgers, or sushi?",
        "No matches found for that search! Maybe try searching for coffee, pizza, burgers, sushi, or other tasty treats?",
        "Oops! Nothing came up for that. Why not search for something delicious like coffee, pizza, burgers, or sushi?",
        "I didn't find any deals matching that search. Try popular items like coffee, pizza, burgers, sushi, or sandwiches!",
    ),
    MessageKind.CONTINUE: (
        "What else are you craving? Just type it in!",
        "Hungry for more deals? Send me another search!",
        "Want to explore more? Just tell me what you're looking for!",
        "Need something else? Just let me know what you want to find!",
        "Keep the searches coming! What would you like next?",
    ),
}

WELCOME_MESSAGE = (
    "Hey there! 👋 I'm your food deals finder! Just tell me what you're craving "
    "and I'll find the best deals for you.\n\n"
    "Try searching for: coffee, pizza, burgers, sushi, tacos, ice cream, or "
    "anything else you're in the mood for! 🍕☕🍔"
)

Chooser = Callable[[Sequence[str]], str]


def is_greeting(message: str) -> bool:
    """Short messages (<= 3 words) containing a greeting word."""
    words = normalize_text(message).split(" ")
    return any(w in GREETING_WORDS for w in words) and len(words) <= GREETING_MAX_WORDS


class ResponseTemplates:
    """Builds user-facing reply text from matched catalog entries."""

    def __init__(
        self,
        chooser: Chooser = random.choice,
        variants: Dict[MessageKind, Tuple[str, ...]] | None = None,
        welcome: str = WELCOME_MESSAGE,
    ) -> None:
        self._chooser = chooser
        self._variants = dict(MESSAGE_VARIANTS if variants is None else variants)
        self._welcome = welcome
        missing = [k.value for k in MessageKind if not self._variants.get(k)]
        if missing:
            raise ValueError(f"No message variants configured for: {missing}")

    def pick(self, kind: MessageKind) -> str:
        return self._chooser(self._variants[kind])

    def welcome_message(self) -> str:
        return self._welcome

    def format_deals(self, entries: Sequence[CatalogEntry]) -> str:
        """
        Numbered list of deals (name, location, offer, description) framed by
        a greeting and a prompt to keep searching. Empty input gives a
        "nothing found" suggestion instead.
        """
        if not entries:
            return self.pick(MessageKind.NO_RESULTS)

        parts = [f"{self.pick(MessageKind.GREETING)}\n\n"]
        for idx, entry in enumerate(entries, start=1):
            parts.append(f"{idx}. *{entry.name}*\n")
            parts.append(f"📍 {entry.location}\n")
            parts.append(f"🎉 {entry.deal}\n")
            parts.append(f"{entry.description}\n\n")
        parts.append(self.pick(MessageKind.CONTINUE))

        logger.debug("Formatted reply with {} deals", len(entries))
        return "".join(parts)
