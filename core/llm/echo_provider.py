from typing import List, Optional
from .base import LLMResponse, Message

# offline stand-in for local runs without a model server
class EchoProvider:
    def __init__(self, model: str = "echo-dev"):
        self.model = model

    def chat(self, messages: List[Message], *, temperature: Optional[float]=None, max_tokens: Optional[int]=None) -> LLMResponse:
        user_inputs = [m["content"] for m in messages if m.get("role") == "user"]
        last = user_inputs[-1] if user_inputs else ""
        idea = ""
        for line in last.splitlines():
            if line.startswith("My idea:"):
                idea = line[len("My idea:"):].strip()
        body = idea or "hey, how's your day going?"
        content = (
            "[emotion: friendly]\n"
            "[reason: echo provider, no model was called]\n\n"
            f"{body}"
        )
        return LLMResponse(content=content, model=self.model, raw={"engine": "echo", "model": self.model, "temp": temperature, "max_tokens": max_tokens})
