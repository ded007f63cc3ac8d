# core/parser/router.py
from __future__ import annotations
from .schema import Action, ParsedCommand

# commands start with "/" so that anything else is plain draft text
def parse_user_text(user_text: str) -> ParsedCommand:
    raw = user_text or ""
    t = raw.strip()
    if not t.startswith("/"):
        return ParsedCommand(Action.TYPE, {"text": raw})

    tokens = t[1:].split()
    if not tokens:
        return ParsedCommand(Action.HELP, {}, confidence=0.0)
    head = tokens[0].lower()
    rest = t[1 + len(tokens[0]):].strip()

    if head in ("help", "h", "?"):
        return ParsedCommand(Action.HELP, {})
    if head in ("show", "ls", "view", "print"):
        return ParsedCommand(Action.SHOW, {})
    if head in ("quit", "q", "exit"):
        return ParsedCommand(Action.QUIT, {})
    if head in ("send", "s"):
        return ParsedCommand(Action.SEND, {})
    if head in ("dismiss", "x", "close"):
        return ParsedCommand(Action.DISMISS, {})

    # generation family
    if head in ("gen", "g", "suggest", "generate"):
        return ParsedCommand(Action.GENERATE, {})
    if head in ("idea", "i"):
        # "/idea" alone uses the current draft as the seed
        return ParsedCommand(Action.GENERATE_IDEA, {"idea": rest})

    # reply relation
    if head in ("reply", "r"):
        if not rest:
            return ParsedCommand(Action.HELP, {}, confidence=0.0)
        return ParsedCommand(Action.REPLY, {"event_id": rest.split()[0]})
    if head in ("unreply", "noreply"):
        return ParsedCommand(Action.CANCEL_REPLY, {})

    # simulated incoming message for the room history
    if head in ("them", "recv"):
        if not rest:
            return ParsedCommand(Action.HELP, {}, confidence=0.0)
        return ParsedCommand(Action.THEM, {"text": rest})

    # unknown command: keep it as text rather than losing it
    return ParsedCommand(Action.TYPE, {"text": raw}, confidence=0.5)
