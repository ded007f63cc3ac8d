"""
Tests for core.composer.ComposerController.

Covers:
  - generate() filling the draft and recording the suggestion baseline
  - empty-draft WITH_SEED routing to WITHOUT_SEED
  - staleness on every edit, dismiss_suggestion()
  - overlapping generations
  - send(): success, rejection, failure restore, reply relation
  - close() abandoning in-flight work
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from core.composer import ComposerController
from core.errors import SendError
from core.state import GenerationMode, RoomContext, SendOutcome, SessionStatus

TAGGED = "[emotion: playful]\n[reason: keeps her talking]\n\nM"


def make_composer(completion=TAGGED, send_ok=True, **kwargs):
    fetch = AsyncMock(return_value=completion)
    send = AsyncMock(return_value=send_ok)
    return ComposerController(fetch_completion=fetch, send_message=send, **kwargs), fetch, send


class _GatedFetch:
    def __init__(self):
        self.gates = []

    async def __call__(self, mode, seed=None, room_context=None):
        gate = asyncio.get_running_loop().create_future()
        self.gates.append((mode, seed, gate))
        return await gate


# ========================================================================
# generate
# ========================================================================


class TestGenerate:
    @pytest.mark.asyncio
    async def test_completed_overwrites_draft_and_records_baseline(self):
        composer, fetch, _ = make_composer()
        composer.set_draft_text("something old")

        state = await composer.generate(GenerationMode.WITHOUT_SEED)

        assert state.status is SessionStatus.COMPLETED
        st = composer.state
        assert st.draft_text == "M"
        assert st.last_suggestion_text == "M"
        assert st.suggestion.reason == "keeps her talking"
        assert st.suggestion.emotion == "playful"
        fetch.assert_awaited_once_with(GenerationMode.WITHOUT_SEED, None, None)

    @pytest.mark.asyncio
    async def test_with_seed_passes_trimmed_draft_and_room(self):
        room = RoomContext(room_id="!room:x", room_name="Linh")
        composer, fetch, _ = make_composer(room_context=room)
        composer.set_draft_text("  ask if she's free friday  ")

        await composer.generate(GenerationMode.WITH_SEED)
        fetch.assert_awaited_once_with(GenerationMode.WITH_SEED, "ask if she's free friday", room)

    @pytest.mark.asyncio
    async def test_with_seed_on_empty_draft_falls_back(self):
        composer, fetch, _ = make_composer()
        composer.set_draft_text("   ")

        state = await composer.generate(GenerationMode.WITH_SEED)
        assert state.status is SessionStatus.COMPLETED
        fetch.assert_awaited_once_with(GenerationMode.WITHOUT_SEED, None, None)

    @pytest.mark.asyncio
    async def test_failed_fetch_leaves_draft_untouched(self):
        composer, fetch, _ = make_composer()
        fetch.side_effect = RuntimeError("503")
        composer.set_draft_text("my own words")

        state = await composer.generate(GenerationMode.WITH_SEED)
        assert state.status is SessionStatus.FAILED
        assert composer.state.draft_text == "my own words"
        assert composer.state.last_suggestion_text is None
        assert composer.state.suggestion is None

    @pytest.mark.asyncio
    async def test_empty_completion_shows_nothing(self):
        composer, _, _ = make_composer(completion="[reason: R]\n\n  ")
        composer.set_draft_text("draft")
        state = await composer.generate(GenerationMode.WITHOUT_SEED)
        assert state.status is SessionStatus.FAILED
        assert composer.state.draft_text == "draft"
        assert composer.state.suggestion is None

    @pytest.mark.asyncio
    async def test_second_request_wins_even_if_first_resolves_later(self):
        fetch = _GatedFetch()
        composer = ComposerController(fetch_completion=fetch, send_message=AsyncMock(return_value=True))
        composer.set_draft_text("idea")

        first = asyncio.create_task(composer.generate(GenerationMode.WITHOUT_SEED))
        await asyncio.sleep(0)
        second = asyncio.create_task(composer.generate(GenerationMode.WITH_SEED))
        await asyncio.sleep(0)
        assert composer.state.generating_mode is GenerationMode.WITH_SEED

        fetch.gates[1][2].set_result("[reason: second]\nsecond message")
        await second
        fetch.gates[0][2].set_result("[reason: first]\nfirst message")
        assert await first is None

        st = composer.state
        assert st.session.status is SessionStatus.COMPLETED
        assert st.draft_text == "second message"
        assert st.suggestion.reason == "second"

    @pytest.mark.asyncio
    async def test_generating_mode_visible_while_in_flight(self):
        fetch = _GatedFetch()
        composer = ComposerController(fetch_completion=fetch, send_message=AsyncMock(return_value=True))
        assert composer.state.generating_mode is None

        task = asyncio.create_task(composer.generate(GenerationMode.WITHOUT_SEED))
        await asyncio.sleep(0)
        assert composer.state.generating_mode is GenerationMode.WITHOUT_SEED

        fetch.gates[0][2].set_result("hi")
        await task
        assert composer.state.generating_mode is None


# ========================================================================
# edits and staleness
# ========================================================================


class TestEdits:
    @pytest.mark.asyncio
    async def test_same_text_keeps_suggestion(self):
        composer, _, _ = make_composer()
        await composer.generate(GenerationMode.WITHOUT_SEED)

        composer.set_draft_text("M")
        assert composer.state.last_suggestion_text == "M"
        assert composer.state.suggestion is not None

    @pytest.mark.asyncio
    async def test_whitespace_only_change_keeps_suggestion(self):
        composer, _, _ = make_composer()
        await composer.generate(GenerationMode.WITHOUT_SEED)

        composer.set_draft_text("  M \n")
        assert composer.state.suggestion is not None

    @pytest.mark.asyncio
    async def test_edit_clears_suggestion_synchronously(self):
        composer, _, _ = make_composer()
        await composer.generate(GenerationMode.WITHOUT_SEED)

        composer.set_draft_text("M!")
        st = composer.state
        assert st.draft_text == "M!"
        assert st.last_suggestion_text is None
        assert st.suggestion is None
        assert st.session.status is SessionStatus.IDLE

        # typing back the original text does not bring the pill back
        composer.set_draft_text("M")
        assert composer.state.suggestion is None

    def test_edit_without_suggestion_just_updates(self):
        composer, _, _ = make_composer()
        composer.set_draft_text("hello")
        assert composer.state.draft_text == "hello"
        assert composer.state.session.status is SessionStatus.IDLE

    def test_draft_is_clipped_to_max_length(self):
        composer, _, _ = make_composer(max_length=5)
        composer.set_draft_text("abcdefgh")
        assert composer.state.draft_text == "abcde"

    def test_default_max_length(self):
        composer, _, _ = make_composer()
        composer.set_draft_text("x" * 6000)
        assert len(composer.state.draft_text) == 5000

    @pytest.mark.asyncio
    async def test_dismiss_keeps_draft(self):
        composer, _, _ = make_composer()
        await composer.generate(GenerationMode.WITHOUT_SEED)

        composer.dismiss_suggestion()
        st = composer.state
        assert st.draft_text == "M"
        assert st.suggestion is None
        assert st.last_suggestion_text is None

    @pytest.mark.asyncio
    async def test_edit_during_new_generation_keeps_it_running(self):
        fetch = _GatedFetch()
        composer = ComposerController(fetch_completion=fetch, send_message=AsyncMock(return_value=True))

        task = asyncio.create_task(composer.generate(GenerationMode.WITHOUT_SEED))
        await asyncio.sleep(0)
        fetch.gates[0][2].set_result("first")
        await task

        task = asyncio.create_task(composer.generate(GenerationMode.WITH_SEED))
        await asyncio.sleep(0)
        composer.set_draft_text("first, edited")
        assert composer.state.last_suggestion_text is None
        assert composer.state.session.status is SessionStatus.GENERATING

        fetch.gates[1][2].set_result("second")
        await task
        assert composer.state.draft_text == "second"
        assert composer.state.last_suggestion_text == "second"


# ========================================================================
# send
# ========================================================================


class TestSend:
    @pytest.mark.asyncio
    async def test_success_clears_everything(self):
        composer, _, send = make_composer()
        await composer.generate(GenerationMode.WITHOUT_SEED)
        composer.set_draft_text("  M  ")

        outcome = await composer.send()

        assert outcome is SendOutcome.SENT
        send.assert_awaited_once_with("M", None)
        st = composer.state
        assert st.draft_text == ""
        assert st.suggestion is None
        assert st.last_suggestion_text is None
        assert st.sending is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("draft", ["", "   ", "\n\t"])
    async def test_empty_draft_is_rejected(self, draft):
        composer, _, send = make_composer()
        composer.set_draft_text(draft)
        assert await composer.send() is SendOutcome.REJECTED
        send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failure_restores_text_but_not_metadata(self):
        composer, _, send = make_composer(completion="[reason: R]\nhello", send_ok=False)
        await composer.generate(GenerationMode.WITHOUT_SEED)
        assert composer.state.draft_text == "hello"

        outcome = await composer.send()

        assert outcome is SendOutcome.FAILED
        st = composer.state
        assert st.draft_text == "hello"
        assert st.last_suggestion_text is None
        assert st.suggestion is None
        assert st.sending is False

    @pytest.mark.asyncio
    async def test_transport_exception_counts_as_failure(self):
        composer, _, send = make_composer()
        send.side_effect = SendError("homeserver said no")
        composer.set_draft_text("hello")

        assert await composer.send() is SendOutcome.FAILED
        assert composer.state.draft_text == "hello"
        assert composer.state.sending is False

    @pytest.mark.asyncio
    async def test_failed_send_drops_suggestion_generated_meanwhile(self):
        gate = None

        async def slow_failing_send(text, reply_to_event_id=None):
            nonlocal gate
            gate = asyncio.get_running_loop().create_future()
            return await gate

        composer = ComposerController(
            fetch_completion=AsyncMock(return_value="[emotion: e]\n[reason: R]\n\nSUGGESTED"),
            send_message=slow_failing_send,
        )
        composer.set_draft_text("hello")
        task = asyncio.create_task(composer.send())
        await asyncio.sleep(0)

        await composer.generate(GenerationMode.WITHOUT_SEED)
        assert composer.state.draft_text == "SUGGESTED"

        gate.set_result(False)
        assert await task is SendOutcome.FAILED

        st = composer.state
        assert st.draft_text == "hello"
        assert st.last_suggestion_text is None
        assert st.suggestion is None
        assert st.session.status is SessionStatus.IDLE

    @pytest.mark.asyncio
    async def test_optimistic_clear_and_concurrent_send_rejected(self):
        gate = None

        async def slow_send(text, reply_to_event_id=None):
            nonlocal gate
            gate = asyncio.get_running_loop().create_future()
            return await gate

        composer = ComposerController(fetch_completion=AsyncMock(return_value="x"), send_message=slow_send)
        composer.set_draft_text("first")
        task = asyncio.create_task(composer.send())
        await asyncio.sleep(0)

        st = composer.state
        assert st.sending is True
        assert st.draft_text == ""
        assert st.can_send is False

        composer.set_draft_text("second")
        assert await composer.send() is SendOutcome.REJECTED
        assert composer.state.draft_text == "second"

        gate.set_result(True)
        assert await task is SendOutcome.SENT
        assert composer.state.sending is False
        assert composer.state.draft_text == "second"

    @pytest.mark.asyncio
    async def test_reply_relation_is_attached_and_cleared(self):
        composer, _, send = make_composer()
        composer.set_reply_to("$event:server")
        composer.set_draft_text("sure!")

        assert composer.state.reply_to_event_id == "$event:server"
        assert await composer.send() is SendOutcome.SENT
        send.assert_awaited_once_with("sure!", "$event:server")
        assert composer.state.reply_to_event_id is None

    @pytest.mark.asyncio
    async def test_reply_relation_not_restored_on_failure(self):
        composer, _, send = make_composer(send_ok=False)
        composer.set_reply_to("$event:server")
        composer.set_draft_text("sure!")

        assert await composer.send() is SendOutcome.FAILED
        assert composer.state.draft_text == "sure!"
        assert composer.state.reply_to_event_id is None

    def test_clear_reply(self):
        composer, _, _ = make_composer()
        composer.set_reply_to("$e")
        composer.clear_reply()
        assert composer.state.reply_to_event_id is None
        composer.set_reply_to("   ")
        assert composer.state.reply_to_event_id is None


# ========================================================================
# close
# ========================================================================


@pytest.mark.asyncio
async def test_close_abandons_in_flight_generation():
    fetch = _GatedFetch()
    composer = ComposerController(fetch_completion=fetch, send_message=AsyncMock(return_value=True))
    composer.set_draft_text("mine")

    task = asyncio.create_task(composer.generate(GenerationMode.WITH_SEED))
    await asyncio.sleep(0)
    composer.close()

    fetch.gates[0][2].set_result("late suggestion")
    assert await task is None
    assert composer.state.draft_text == "mine"
    assert composer.state.session.status is SessionStatus.IDLE
