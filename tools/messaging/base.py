from __future__ import annotations
from typing import Optional, Protocol


class MessageSender(Protocol):
    async def __call__(self, text: str, reply_to_event_id: Optional[str] = None) -> bool:
        '''return True once the transport accepted the message'''
        ...
