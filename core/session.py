# core/session.py
from __future__ import annotations
import logging
from typing import Callable, Optional

from agents.base import CompletionFetcher
from core.errors import FetchError, ParseError
from core.parser.response_parser import parse_completion
from core.parser.schema import ParsedSuggestion
from core.state import GenerationMode, RoomContext, SessionState

logger = logging.getLogger(__name__)


class GenerationSession:
    """
    Runs completion requests and keeps the state of the latest one.

    Every ``start`` takes a new request token. The network call behind an older
    token is never cancelled, but when it resolves its result is dropped, so
    only the most recent request can move the session to Completed or Failed.
    """

    def __init__(
        self,
        fetch_completion: CompletionFetcher,
        parser: Callable[[str], ParsedSuggestion] = parse_completion,
    ):
        self.fetch_completion = fetch_completion
        self.parser = parser
        self.state = SessionState.idle()
        self.raw_completion: Optional[str] = None
        self._token = 0

    @property
    def token(self) -> int:
        return self._token

    def is_current(self, token: int) -> bool:
        return token == self._token

    async def start(
        self,
        mode: GenerationMode,
        seed: Optional[str] = None,
        room_context: Optional[RoomContext] = None,
    ) -> Optional[SessionState]:
        """Return the state this request produced, or None if a newer one superseded it."""
        if mode is GenerationMode.WITH_SEED:
            seed = (seed or "").strip()
            if not seed:
                raise ValueError("WITH_SEED generation needs a non-empty seed")
        else:
            seed = None

        self._token += 1
        token = self._token
        self.state = SessionState.generating(mode)
        self.raw_completion = None
        logger.debug("generation #%d started (mode=%s)", token, mode.value)

        try:
            raw = await self.fetch_completion(mode, seed, room_context)
        except Exception as e:
            err = e if isinstance(e, FetchError) else FetchError(f"{e.__class__.__name__}: {e}")
            if not self.is_current(token):
                logger.debug("generation #%d failed after being superseded: %s", token, err)
                return None
            logger.warning("generation #%d failed: %s", token, err)
            self.state = SessionState.failed(str(err))
            return self.state

        if not self.is_current(token):
            logger.debug("generation #%d superseded by #%d, dropping result", token, self._token)
            return None

        try:
            suggestion = self.parser(raw)
        except ParseError as e:
            logger.warning("generation #%d returned an unusable completion: %s", token, e)
            self.state = SessionState.failed(str(e))
            return self.state

        self.raw_completion = raw
        self.state = SessionState.completed(suggestion)
        logger.debug("generation #%d completed", token)
        return self.state

    def reset(self) -> bool:
        """Back to Idle. An in-flight request is left alone; returns False in that case."""
        if self.state.is_generating:
            return False
        self.state = SessionState.idle()
        self.raw_completion = None
        return True

    def abandon(self) -> None:
        # any response still on the way will fail the token check
        self._token += 1
        self.state = SessionState.idle()
        self.raw_completion = None
