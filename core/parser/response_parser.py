# core/parser/response_parser.py
from __future__ import annotations
import logging
import re
from typing import Dict, List, Optional, Tuple

from core.errors import ParseError, ParseErrorKind
from .schema import ParsedSuggestion

logger = logging.getLogger(__name__)

KNOWN_KEYS = ("emotion", "reason")

# [key: value] at the start of a line; the first "]" closes the tag
_TAG_RE = re.compile(r"^\[([^:\]]*):([^\]]*)\]")


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _match_tag(line: str) -> Optional[Tuple[str, str, str]]:
    """Return (key, value, rest_of_line) if the stripped line opens with a tag."""
    m = _TAG_RE.match(line)
    if not m:
        return None
    key = m.group(1).strip().lower()
    if not key:
        return None
    return key, m.group(2).strip(), line[m.end():].strip()


def parse_completion(raw: Optional[str]) -> ParsedSuggestion:
    """
    Split a model completion into leading metadata tags and the message body.

    Only the contiguous block of ``[key: value]`` lines (blank lines allowed in
    between) at the top is read as metadata. The first other line starts the
    body, which runs to the end of the text. Unknown keys are skipped and a
    repeated key keeps its last value. Raises ParseError when no body is left.
    """
    lines = _normalize_newlines(raw or "").split("\n")

    meta: Dict[str, Optional[str]] = {}
    body_lines: List[str] = []

    for i, line in enumerate(lines):
        remaining = line.strip()
        while remaining:
            tag = _match_tag(remaining)
            if tag is None:
                break
            key, value, remaining = tag
            if key in KNOWN_KEYS:
                meta[key] = value or None
            else:
                logger.debug("ignoring unknown completion tag %r", key)
        if remaining:
            # first non-tag text opens the body, even when glued after a "]"
            body_lines = [remaining, *lines[i + 1:]] if remaining != line.strip() else lines[i:]
            break

    message = "\n".join(body_lines).strip()
    if not message:
        raise ParseError(ParseErrorKind.EMPTY_MESSAGE, "completion has no message body")

    return ParsedSuggestion(
        message=message,
        emotion=meta.get("emotion"),
        reason=meta.get("reason"),
    )
