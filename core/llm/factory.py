from .echo_provider import EchoProvider
from .ollama_provider import OllamaProvider

def build_provider(cfg:dict):
    llm = cfg['llm']
    if llm.get('provider') == 'ollama':
        max_tokens = llm.get('max_tokens')
        return OllamaProvider(
            base_url=llm ['base_url'],
            model = llm['model'],
            time_out_s= int(llm.get('time_out_s',120)),
            temperature = float(llm.get('temperature',0.7)),
            max_tokens = int(max_tokens) if max_tokens is not None else None,
        )
    if llm.get('provider') == 'echo':
        return EchoProvider(model=llm.get('model', 'echo-dev'))
    raise ValueError(f"Unknown provider: {llm.get('provider')}")
