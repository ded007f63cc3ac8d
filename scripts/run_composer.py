from __future__ import annotations
import asyncio
import logging

from agents.suggest_agent import SuggestAgent
from core.composer import ComposerController
from core.config import load_cfg, setup_logging
from core.llm.factory import build_provider
from core.parser.router import parse_user_text
from core.parser.schema import Action
from core.state import GenerationMode, RoomContext, RoomMessage, SendOutcome, SessionStatus
from tools.messaging.factory import build_message_sender

logger = logging.getLogger("scripts.run_composer")

HELP = (
    "Type text to replace the draft. Commands:\n"
    "  /gen            suggest a message from the conversation\n"
    "  /idea [text]    turn your idea (or the current draft) into a message\n"
    "  /send           send the draft\n"
    "  /reply <id>     reply to an event, /unreply to drop it\n"
    "  /them <text>    add a message from the other side to the history\n"
    "  /dismiss        hide the suggestion reasoning\n"
    "  /show           show the composer state\n"
    "  /quit"
)


def show_state(composer: ComposerController) -> str:
    st = composer.state
    lines = ["----- COMPOSER -----", f"Draft: {st.draft_text or '(empty)'}"]
    if st.reply_to_event_id:
        lines.append(f"Replying to: {st.reply_to_event_id}")
    s = st.suggestion
    if s is not None:
        if s.emotion:
            lines.append(f"Emotion: {s.emotion}")
        if s.reason:
            lines.append(f"Reason: {s.reason}")
    if st.session.status is SessionStatus.FAILED:
        lines.append(f"Last generation failed: {st.session.error}")
    lines.append("--------------------")
    return "\n".join(lines)


async def handle(composer: ComposerController, history: list, user_text: str) -> str | None:
    cmd = parse_user_text(user_text)

    if cmd.action == Action.QUIT:
        return None
    if cmd.action == Action.HELP:
        return HELP
    if cmd.action == Action.SHOW:
        return show_state(composer)
    if cmd.action == Action.TYPE:
        composer.set_draft_text(cmd.args["text"])
        return show_state(composer)
    if cmd.action == Action.DISMISS:
        composer.dismiss_suggestion()
        return show_state(composer)
    if cmd.action == Action.REPLY:
        composer.set_reply_to(cmd.args["event_id"])
        return show_state(composer)
    if cmd.action == Action.CANCEL_REPLY:
        composer.clear_reply()
        return show_state(composer)
    if cmd.action == Action.THEM:
        history.append(RoomMessage(sender="Them", body=cmd.args["text"]))
        return f"Them: {cmd.args['text']}"

    if cmd.action in (Action.GENERATE, Action.GENERATE_IDEA):
        mode = GenerationMode.WITHOUT_SEED
        if cmd.action == Action.GENERATE_IDEA:
            if cmd.args.get("idea"):
                composer.set_draft_text(cmd.args["idea"])
            mode = GenerationMode.WITH_SEED
        print("(generating...)")
        await composer.generate(mode)
        return show_state(composer)

    if cmd.action == Action.SEND:
        text = composer.state.draft_text.strip()
        outcome = await composer.send()
        if outcome is SendOutcome.SENT:
            history.append(RoomMessage(sender="Me", body=text, from_me=True))
            return "sent."
        if outcome is SendOutcome.REJECTED:
            return "nothing to send."
        return "send failed, your text is back in the draft.\n" + show_state(composer)

    return HELP


async def main():
    cfg = load_cfg()
    setup_logging(cfg)
    composer_cfg = cfg.get("composer", {}) or {}

    provider = build_provider(cfg)
    agent = SuggestAgent(provider, profile=cfg.get("profile", {}), history_limit=int(composer_cfg.get("history_limit", 20)))
    sender = build_message_sender(cfg)

    room = RoomContext(room_id=getattr(sender, "room_id", "!local:dev"), room_name="local chat")
    composer = ComposerController(
        fetch_completion=agent.fetch_completion,
        send_message=sender.send_message,
        room_context=room,
        max_length=int(composer_cfg.get("max_length", 5000)),
    )

    print("Composer (type '/help' for commands, '/quit' to leave)")
    try:
        while True:
            user_text = await asyncio.to_thread(input, "\nYou> ")
            out = await handle(composer, room.recent_messages, user_text)
            if out is None:
                print("Bye!")
                break
            print(out)
    finally:
        composer.close()


if __name__ == '__main__':
    asyncio.run(main())
