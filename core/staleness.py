# core/staleness.py
from __future__ import annotations
from typing import Optional


def is_stale(current_draft_text: str, last_suggestion_text: Optional[str]) -> bool:
    """True once the compose box no longer holds the suggestion that was put there.

    Exact comparison after trimming both sides; no suggestion means nothing to go stale.
    """
    if last_suggestion_text is None:
        return False
    return (current_draft_text or "").strip() != last_suggestion_text.strip()
