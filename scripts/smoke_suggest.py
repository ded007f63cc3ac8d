import asyncio
import sys

from agents.suggest_agent import SuggestAgent
from core.config import load_cfg, setup_logging
from core.errors import ParseError
from core.llm.factory import build_provider
from core.parser.response_parser import parse_completion
from core.state import GenerationMode, RoomContext, RoomMessage

async def main():
    idea = " ".join(sys.argv[1:]).strip()
    cfg = load_cfg()
    setup_logging(cfg)
    agent = SuggestAgent(build_provider(cfg), profile=cfg.get("profile", {}))

    room = RoomContext(room_id="!smoke:dev", recent_messages=[
        RoomMessage(sender="Them", body="just got back from the beach, so tired"),
    ])
    mode = GenerationMode.WITH_SEED if idea else GenerationMode.WITHOUT_SEED
    raw = await agent.fetch_completion(mode, idea or None, room)
    print("----- RAW -----")
    print(raw)
    try:
        parsed = parse_completion(raw)
    except ParseError as e:
        print(f"unusable completion: {e}")
        sys.exit(1)
    print("----- PARSED -----")
    print(f"emotion: {parsed.emotion}")
    print(f"reason:  {parsed.reason}")
    print(f"message: {parsed.message}")

if __name__ == "__main__":
    asyncio.run(main())
