from __future__ import annotations
from typing import Any, Dict

from .console_sender import ConsoleSender

def build_message_sender(cfg: Dict[str, Any]):
    msg_cfg = cfg.get("messaging", {}) or {}
    ptype = msg_cfg.get("provider", "console")

    if ptype == "console":
        return ConsoleSender(
            room_id=msg_cfg.get("room_id", "!local:dev"),
            fail_next=int(msg_cfg.get("fail_next", 0)),
        )

    raise ValueError(f"Unknown messaging provider type: {ptype}")
