#rules that every completion source needs to follow
from __future__ import annotations
from typing import Optional, Protocol

from core.state import GenerationMode, RoomContext


class CompletionFetcher(Protocol):
    async def __call__(
        self,
        mode: GenerationMode,
        seed: Optional[str] = None,
        room_context: Optional[RoomContext] = None,
    ) -> str: #raw completion text, untrusted
        ...
