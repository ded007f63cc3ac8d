# core/errors.py
from __future__ import annotations
from enum import Enum


class ComposerError(Exception):
    """Base class for failures that stay local to the composer."""


class ParseErrorKind(str, Enum):
    EMPTY_MESSAGE = "EMPTY_MESSAGE"


class ParseError(ComposerError, ValueError):
    def __init__(self, kind: ParseErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)


class FetchError(ComposerError):
    """The completion service could not be reached or answered with an error."""


class SendError(ComposerError):
    """The messaging transport refused or failed to deliver a message."""
