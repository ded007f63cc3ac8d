from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import logging

from agents.base import CompletionFetcher
from tools.messaging.base import MessageSender
from core.session import GenerationSession
from core.staleness import is_stale
from core.state import (
    ComposerState,
    GenerationMode,
    RoomContext,
    SendOutcome,
    SessionState,
    SessionStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_LENGTH = 5000


@dataclass
class ComposerController:
    """
    Owns the compose box of one open conversation.

    The UI reads ``state`` and calls the methods below; there is no other way
    to change the draft, the accepted suggestion or the generation session.
    """
    fetch_completion: CompletionFetcher
    send_message: MessageSender
    room_context: Optional[RoomContext] = None
    max_length: int = DEFAULT_MAX_LENGTH

    def __post_init__(self):
        self.session = GenerationSession(self.fetch_completion)
        self._draft_text = ""
        self._last_suggestion_text: Optional[str] = None
        self._sending = False
        self._reply_to_event_id: Optional[str] = None

    @property
    def state(self) -> ComposerState:
        return ComposerState(
            draft_text=self._draft_text,
            last_suggestion_text=self._last_suggestion_text,
            session=self.session.state,
            sending=self._sending,
            reply_to_event_id=self._reply_to_event_id,
        )

    def _clear_suggestion(self) -> None:
        self._last_suggestion_text = None
        self.session.reset()

    # ---- edits ----
    def set_draft_text(self, text: str) -> None:
        text = text or ""
        if self.max_length and len(text) > self.max_length:
            text = text[: self.max_length]
        self._draft_text = text

        if is_stale(text, self._last_suggestion_text):
            logger.debug("draft diverged from suggestion, clearing it")
            self._clear_suggestion()

    def dismiss_suggestion(self) -> None:
        """Hide the reason/emotion pill; the draft text stays as it is."""
        self._clear_suggestion()

    # ---- reply relation ----
    def set_reply_to(self, event_id: Optional[str]) -> None:
        self._reply_to_event_id = (event_id or "").strip() or None

    def clear_reply(self) -> None:
        self._reply_to_event_id = None

    # ---- generation ----
    async def generate(self, mode: GenerationMode) -> Optional[SessionState]:
        seed: Optional[str] = None
        if mode is GenerationMode.WITH_SEED:
            seed = self._draft_text.strip()
            if not seed:
                # nothing typed yet, the idea is optional context
                mode = GenerationMode.WITHOUT_SEED
                seed = None

        result = await self.session.start(mode, seed=seed, room_context=self.room_context)
        if result is None:
            return None

        if result.status is SessionStatus.COMPLETED and result.suggestion is not None:
            message = result.suggestion.message
            self._draft_text = message
            self._last_suggestion_text = message
        return result

    # ---- send ----
    async def send(self) -> SendOutcome:
        text = self._draft_text.strip()
        if not text or self._sending:
            return SendOutcome.REJECTED

        reply_to = self._reply_to_event_id
        # optimistic clear; only the text comes back if the transport fails
        self._draft_text = ""
        self._clear_suggestion()
        self._reply_to_event_id = None
        self._sending = True

        try:
            ok = await self.send_message(text, reply_to)
        except Exception as e:
            logger.warning("Failed to send message: %s", e)
            ok = False
        finally:
            self._sending = False

        if not ok:
            logger.warning("send failed, restoring draft")
            self._draft_text = text
            # a generation may have landed while the send was pending
            if is_stale(text, self._last_suggestion_text):
                self._clear_suggestion()
            return SendOutcome.FAILED

        logger.info("message sent (%d chars, reply_to=%s)", len(text), reply_to)
        return SendOutcome.SENT

    def close(self) -> None:
        """View closed: drop any in-flight generation."""
        self.session.abandon()
        self._last_suggestion_text = None
