# core/state.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from core.parser.schema import ParsedSuggestion


class GenerationMode(str, Enum):
    WITH_SEED = "WITH_SEED"        # current draft goes to the model as an idea
    WITHOUT_SEED = "WITHOUT_SEED"  # room context only


class SessionStatus(str, Enum):
    IDLE = "IDLE"
    GENERATING = "GENERATING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class SessionState:
    status: SessionStatus = SessionStatus.IDLE
    mode: Optional[GenerationMode] = None
    suggestion: Optional[ParsedSuggestion] = None
    error: Optional[str] = None

    @classmethod
    def idle(cls) -> "SessionState":
        return cls()

    @classmethod
    def generating(cls, mode: GenerationMode) -> "SessionState":
        return cls(status=SessionStatus.GENERATING, mode=mode)

    @classmethod
    def completed(cls, suggestion: ParsedSuggestion) -> "SessionState":
        return cls(status=SessionStatus.COMPLETED, suggestion=suggestion)

    @classmethod
    def failed(cls, reason: str) -> "SessionState":
        return cls(status=SessionStatus.FAILED, error=reason)

    @property
    def is_generating(self) -> bool:
        return self.status is SessionStatus.GENERATING


@dataclass(frozen=True)
class ComposerState:
    """Read-only view handed to the UI; ComposerController is the only writer."""
    draft_text: str = ""
    last_suggestion_text: Optional[str] = None
    session: SessionState = field(default_factory=SessionState.idle)
    sending: bool = False
    reply_to_event_id: Optional[str] = None

    @property
    def suggestion(self) -> Optional[ParsedSuggestion]:
        # metadata pill (reason/emotion) is shown only while the accepted suggestion is live
        if self.last_suggestion_text is None:
            return None
        return self.session.suggestion

    @property
    def generating_mode(self) -> Optional[GenerationMode]:
        return self.session.mode if self.session.is_generating else None

    @property
    def can_send(self) -> bool:
        return bool(self.draft_text.strip()) and not self.sending


@dataclass
class RoomMessage:
    sender: str
    body: str
    from_me: bool = False


@dataclass
class RoomContext:
    room_id: str
    room_name: Optional[str] = None
    recent_messages: List[RoomMessage] = field(default_factory=list)


class SendOutcome(str, Enum):
    SENT = "SENT"
    REJECTED = "REJECTED"  # empty draft or a send already pending
    FAILED = "FAILED"
