from __future__ import annotations
import asyncio
import logging
from typing import List, Optional

from core.llm.base import LLMProvider, Message
from core.state import GenerationMode, RoomContext

logger = logging.getLogger(__name__)

FORMAT_RULES = (
    "Answer in exactly this format:\n"
    "[emotion: <the emotional tone of the reply>]\n"
    "[reason: <one or two sentences on why this reply works>]\n"
    "\n"
    "<the message itself, ready to send>\n"
    "Rules:\n"
    "- Write only ONE message, no alternatives, no quotes around it.\n"
    "- Match the language the conversation is written in.\n"
    "- Keep it short and natural, like a real chat message."
)


class SuggestAgent:
    name = "suggest"

    def __init__(self, provider: LLMProvider, profile: dict | None = None, history_limit: int = 20):
        self.llm = provider
        self.profile = profile or {}
        self.history_limit = history_limit

    def _system_prompt(self) -> str:
        name = self.profile.get("display_name", "the user")
        persona = self.profile.get("persona", "").strip()
        lines = [
            f"You help {name} write the next message in a private chat.",
            "You only suggest; the user decides whether to send it.",
        ]
        if persona:
            lines.append(f"Voice and style: {persona}")
        lines.append(FORMAT_RULES)
        return "\n".join(lines)

    def _format_history(self, room_context: Optional[RoomContext]) -> str:
        if room_context is None or not room_context.recent_messages:
            return "(no messages yet)"
        recent = room_context.recent_messages[-self.history_limit:] if self.history_limit else room_context.recent_messages
        lines = []
        for m in recent:
            who = "Me" if m.from_me else (m.sender or "Them")
            lines.append(f"{who}: {m.body}")
        return "\n".join(lines)

    def build_messages(
        self,
        mode: GenerationMode,
        seed: Optional[str] = None,
        room_context: Optional[RoomContext] = None,
    ) -> List[Message]:
        room_line = ""
        if room_context is not None and room_context.room_name:
            room_line = f"Chat: {room_context.room_name}\n"

        user_parts = [
            f"{room_line}Conversation so far:\n{self._format_history(room_context)}\n",
        ]
        if mode is GenerationMode.WITH_SEED and seed:
            user_parts.append(
                "Turn my idea into the next message. Keep my intent, improve the wording.\n"
                f"My idea: {seed}"
            )
        else:
            user_parts.append("Suggest the next message I should send.")

        return [
            {"role": "system", "content": self._system_prompt()},
            {"role": "user", "content": "\n".join(user_parts)},
        ]

    async def fetch_completion(
        self,
        mode: GenerationMode,
        seed: Optional[str] = None,
        room_context: Optional[RoomContext] = None,
    ) -> str:
        messages = self.build_messages(mode, seed, room_context)
        # providers are blocking (requests), keep the event loop free
        resp = await asyncio.to_thread(self.llm.chat, messages)
        logger.debug("completion for mode=%s: %d chars", mode.value, len(resp.content or ""))
        return resp.content or ""
