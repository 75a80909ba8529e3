"""
Tests for the generation round orchestration: busy gate, success and
failure paths, templates and restores.
"""

import asyncio

import pytest

from conftest import POPUP_FILES, FakeAdapter
from models.schemas import ExtensionTemplate, GeneratedFile, Message, SavedExtension
from services.errors import CredentialMissingError, GenerationBusyError, GenerationError
from services.workspace_svc import ACKNOWLEDGEMENT, GREETING, Workspace


class BlockingAdapter(FakeAdapter):
    """Holds the round open until released."""

    def __init__(self):
        super().__init__()
        self.release = asyncio.Event()

    async def generate_files(self, messages):
        self.calls.append(list(messages))
        await self.release.wait()
        return self.files


def test_fresh_workspace_starts_with_greeting():
    ws = Workspace()
    assert [m.model_dump() for m in ws.messages] == [{"role": "assistant", "content": GREETING}]
    assert len(ws.files) == 0
    assert not ws.busy


def test_successful_round_installs_files_and_acknowledges():
    ws = Workspace()
    adapter = FakeAdapter()
    result = asyncio.run(ws.send_message("Make a note taker", lambda: adapter))

    assert [f.filename for f in result] == [f.filename for f in POPUP_FILES]
    assert ws.files.find("popup.js").content == "console.log(1)"
    assert [m.role for m in ws.messages] == ["assistant", "user", "assistant"]
    assert ws.messages[-1].content == ACKNOWLEDGEMENT
    assert ws.selection.selected == "manifest.json"
    assert not ws.busy


def test_adapter_receives_full_conversation():
    ws = Workspace()
    adapter = FakeAdapter()
    asyncio.run(ws.send_message("first", lambda: adapter))
    asyncio.run(ws.send_message("second", lambda: adapter))

    history = adapter.calls[1]
    assert [m.content for m in history] == [GREETING, "first", ACKNOWLEDGEMENT, "second"]


def test_failed_round_leaves_files_unchanged():
    ws = Workspace()
    ws.start_new_session(files=POPUP_FILES)
    before = ws.files.to_list()
    message_count = len(ws.messages)
    adapter = FakeAdapter(error=GenerationError("Failed to generate code. boom"))

    with pytest.raises(GenerationError):
        asyncio.run(ws.send_message("break it", lambda: adapter))

    assert ws.files.to_list() == before
    # user message plus exactly one assistant error message
    assert len(ws.messages) == message_count + 2
    assert ws.messages[-1] == Message(role="assistant", content="I encountered an error: Failed to generate code. boom")
    assert ws.last_error == "Failed to generate code. boom"
    assert not ws.busy


def test_missing_credential_fails_round_with_distinct_error():
    ws = Workspace()

    def factory():
        raise CredentialMissingError("No Gemini API key is configured. Add your key in Settings.")

    with pytest.raises(CredentialMissingError):
        asyncio.run(ws.send_message("hello", factory))
    assert "Add your key in Settings" in ws.messages[-1].content
    assert len(ws.files) == 0


def test_unexpected_adapter_error_is_reported_as_generation_error():
    ws = Workspace()
    adapter = FakeAdapter(error=RuntimeError("socket closed"))
    with pytest.raises(GenerationError, match="socket closed"):
        asyncio.run(ws.send_message("hello", lambda: adapter))
    assert ws.messages[-1].content == "I encountered an error: socket closed"


def test_empty_result_is_a_failure():
    ws = Workspace()
    adapter = FakeAdapter(files=[])
    with pytest.raises(GenerationError):
        asyncio.run(ws.send_message("hello", lambda: adapter))
    assert len(ws.files) == 0


def test_blank_message_rejected_before_round():
    ws = Workspace()
    adapter = FakeAdapter()
    with pytest.raises(ValueError):
        asyncio.run(ws.send_message("   ", lambda: adapter))
    assert adapter.calls == []
    assert len(ws.messages) == 1


def test_second_round_rejected_while_busy():
    ws = Workspace()
    adapter = BlockingAdapter()

    async def scenario():
        first = asyncio.create_task(ws.send_message("one", lambda: adapter))
        await asyncio.sleep(0)
        assert ws.busy
        with pytest.raises(GenerationBusyError):
            await ws.send_message("two", lambda: adapter)
        adapter.release.set()
        await first

    asyncio.run(scenario())
    assert len(adapter.calls) == 1
    assert [m.content for m in ws.messages if m.role == "user"] == ["one"]
    assert not ws.busy


def test_switching_project_rejected_while_busy():
    ws = Workspace()
    adapter = BlockingAdapter()

    async def scenario():
        first = asyncio.create_task(ws.send_message("one", lambda: adapter))
        await asyncio.sleep(0)
        with pytest.raises(GenerationBusyError):
            ws.start_new_session()
        adapter.release.set()
        await first

    asyncio.run(scenario())


def test_new_session_round_discards_previous_state():
    ws = Workspace()
    ws.start_new_session(
        messages=[Message(role="assistant", content=GREETING), Message(role="user", content="old")],
        files=[GeneratedFile(filename="old.js", content="x")],
    )
    adapter = FakeAdapter()
    asyncio.run(ws.send_message("brand new", lambda: adapter, new_session=True))

    assert [m.content for m in adapter.calls[0]] == [GREETING, "brand new"]
    assert ws.files.find("old.js") is None


def test_apply_template():
    ws = Workspace()
    template = ExtensionTemplate(
        id="note-taker", title="Quick Note Taker", description="d",
        initial_prompt="Create a note taker", icon="clipboard",
        files=[GeneratedFile(filename="popup.html", content="<p>notes</p>")],
    )
    ws.apply_template(template)

    assert [m.role for m in ws.messages] == ["assistant", "user", "assistant"]
    assert ws.messages[1].content == "Create a note taker"
    assert '"Quick Note Taker" template' in ws.messages[2].content
    assert ws.files.filenames() == ["popup.html"]
    assert ws.selection.selected == "popup.html"


def test_restore_replaces_conversation_and_files():
    ws = Workspace()
    project = SavedExtension(
        id="1", name="Demo", description="d", saved_at="2026-01-01T00:00:00+00:00",
        files=[GeneratedFile(filename="a.js", content="a")],
        messages=[Message(role="user", content="hi")],
    )
    ws.restore(project)
    assert ws.messages == [Message(role="user", content="hi")]
    assert ws.files.filenames() == ["a.js"]


def test_subscribers_notified_on_every_mutation():
    ws = Workspace()
    seen = []
    ws.subscribe(lambda w: seen.append(w.revision))
    asyncio.run(ws.send_message("go", lambda: FakeAdapter()))
    # user message (no file change) then the new files
    assert seen == [0, 1]
