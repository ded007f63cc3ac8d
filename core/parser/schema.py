# core/parser/schema.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ParsedSuggestion:
    message: str  # text that goes into the compose box, never empty
    emotion: Optional[str] = None
    reason: Optional[str] = None


# terminal composer commands (scripts/run_composer.py)
class Action(str, Enum):
    TYPE = "TYPE"
    GENERATE = "GENERATE"
    GENERATE_IDEA = "GENERATE_IDEA"
    SEND = "SEND"
    SHOW = "SHOW"
    DISMISS = "DISMISS"
    REPLY = "REPLY"
    CANCEL_REPLY = "CANCEL_REPLY"
    THEM = "THEM"  # incoming message from the other side
    HELP = "HELP"
    QUIT = "QUIT"


@dataclass
class ParsedCommand:
    action: Action
    args: Dict[str, Any]
    confidence: float = 1.0
