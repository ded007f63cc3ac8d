from typing import Protocol, List, Dict, Optional
from dataclasses import dataclass
Message = Dict[str,str] #{"role":"...","content":'...'}

@dataclass
class LLMResponse:
    content:str # raw completion text, handed to the response parser untouched
    model:str|None = None
    raw:dict|None = None

class LLMProvider(Protocol):
    model: str

    # blocking call; SuggestAgent runs it off the event loop
    def chat(
        self,
        messages:List[Message],
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse: ...
