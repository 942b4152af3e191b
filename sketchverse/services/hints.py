# sketchverse/services/hints.py
import logging

import requests
from sqlalchemy.orm import Session

from ..config import Config
from ..models.message import Message
from .chat import add_message, recent_guesses
from .membership import normalize_code
from .turns import PLAYING, get_game

logger = logging.getLogger(__name__)

NO_GUESSES_HINT = "Make a few guesses first and then I can give you a hint!"
FALLBACK_HINT = "Sorry, I couldn't think of a hint right now. Try guessing again!"

DRAWING_DESCRIPTION = "A player's drawing"

SYSTEM_PROMPT = """\
You are assisting players in a drawing and guessing game.
Based on the drawing and the guesses so far, provide a single helpful hint
to guide the players. The hint should not directly reveal the answer but
nudge them in the right direction. Make the hint creative.
Reply with the hint only.
"""


class HintService:
    """Client for an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ):
        self.api_url = api_url or Config.HINT_API_URL
        self.api_key = Config.HINT_API_KEY if api_key is None else api_key
        self.model = model or Config.HINT_MODEL
        self.timeout = timeout or Config.HINT_TIMEOUT_SEC

    def get_hint(self, drawing_description: str, recent_guesses: list[str]) -> str:
        """Never raises: any failure degrades to ``FALLBACK_HINT``."""
        if not recent_guesses:
            return NO_GUESSES_HINT
        if not self.api_key:
            logger.warning("No hint API key configured, using fallback hint")
            return FALLBACK_HINT

        user_text = (
            f"The current drawing is described as: {drawing_description}.\n"
            f"Recent guesses include: {', '.join(recent_guesses)}.\n"
            "Hint:"
        )
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_text},
            ],
            "max_tokens": 60,
            "temperature": 0.8,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        try:
            resp = requests.post(self.api_url, headers=headers, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            hint = resp.json()["choices"][0]["message"]["content"].strip()
        except (requests.RequestException, ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
            logger.warning("Hint service failed: %s", exc)
            return FALLBACK_HINT

        return hint or FALLBACK_HINT


hint_service = HintService()


def request_hint(db: Session, code: str, service: HintService | None = None) -> Message | None:
    """Ask for a hint on the running turn and post it to the chat (no author)."""
    code = normalize_code(code)
    game = get_game(db, code)
    if game.status != PLAYING:
        return None

    hint = (service or hint_service).get_hint(DRAWING_DESCRIPTION, recent_guesses(db, code, limit=5))
    msg = add_message(db, code, hint, "hint")
    db.commit()
    db.refresh(msg)
    return msg
