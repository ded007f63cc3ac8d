from __future__ import annotations

import logging
import sys
from typing import List, Optional, TextIO, Tuple

from core.errors import SendError

logger = logging.getLogger(__name__)


class ConsoleSender:
    """Local stand-in for the chat transport: prints what would be sent."""
    name = "console"

    def __init__(self, room_id: str = "!local:dev", stream: TextIO | None = None, fail_next: int = 0):
        self.room_id = room_id
        self.stream = stream if stream is not None else sys.stdout
        self.fail_next = fail_next  # simulate transport failures for the next N sends
        self.sent: List[Tuple[str, Optional[str]]] = []

    async def send_message(self, text: str, reply_to_event_id: Optional[str] = None) -> bool:
        if self.fail_next > 0:
            self.fail_next -= 1
            raise SendError(f"simulated send failure in {self.room_id}")
        self.sent.append((text, reply_to_event_id))
        prefix = f"[{self.room_id}]"
        if reply_to_event_id:
            prefix += f" (reply to {reply_to_event_id})"
        logger.debug("console send to %s (%d chars)", self.room_id, len(text))
        print(f"{prefix} {text}", file=self.stream)
        return True
