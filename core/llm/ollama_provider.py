import logging
import requests
from typing import List, Optional, Dict, Any
from core.errors import FetchError
from .base import LLMResponse, Message

logger = logging.getLogger(__name__)

class OllamaProvider:
    def __init__(self, base_url:str, model:str, time_out_s: int = 120, temperature: float=0.7, max_tokens: Optional[int]=None):
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.timeout_s = time_out_s
        self.temperature =temperature
        self.max_tokens = max_tokens
    def chat(self, messages: List[Message], *, temperature: Optional[float]=None, max_tokens: Optional[int]=None) -> LLMResponse:
        temp = self.temperature if temperature is None else temperature
        limit = self.max_tokens if max_tokens is None else max_tokens
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {"temperature": temp},
        }
        if limit is not None:
            payload["options"]["num_predict"] = limit

        url = f"{self.base_url}/api/chat"
        try:
            r = requests.post(url, json=payload, timeout=self.timeout_s)
            r.raise_for_status()
            data = r.json()
        except requests.RequestException as e:
            raise FetchError(f"Ollama request to {url} failed: {e}") from e
        except ValueError as e:
            raise FetchError(f"Ollama returned a non-JSON body: {e}") from e

        message = data.get("message") if isinstance(data, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if content is None:
            raise FetchError(f"Ollama response has no message content: {str(data)[:200]}")
        logger.debug("ollama %s answered with %d chars", self.model, len(content))
        return LLMResponse(content=content, model=self.model, raw=data)
