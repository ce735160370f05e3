"""Shared test fixtures for the entire test suite."""

import itertools
from pathlib import Path
from typing import Optional

import pytest

from assistant_buddy.entities import (
    DEFAULT_PAGE_SIZE,
    AssistantConfig,
    AssistantId,
    FileBundleSpec,
    FileId,
    IRemoteClient,
    MessageContent,
    RemoteAssistant,
    RemoteAssistantFile,
    RemoteFile,
    RemoteMessage,
    RemoteRun,
    RemoteThread,
    RunId,
    ServiceConfig,
    ThreadId,
)
from assistant_buddy.errors import RemoteAPIError

MUTATING_CALLS = {
    "create_assistant",
    "update_assistant_instructions",
    "delete_assistant",
    "create_file",
    "delete_file",
    "create_assistant_file",
    "delete_assistant_file",
}


class FakeRemoteClient(IRemoteClient):
    """In-memory remote service recording every call made to it."""

    def __init__(self) -> None:
        self.assistants: dict[str, RemoteAssistant] = {}
        self.files: dict[str, RemoteFile] = {}
        self.uploads: dict[str, bytes] = {}
        self.attachments: dict[str, list[str]] = {}
        self.threads: set[str] = set()
        self.messages: dict[str, list[RemoteMessage]] = {}
        self.runs: dict[str, RemoteRun] = {}
        self.run_statuses: list[str] = ["completed"]
        self.reply_text = "reply"
        self.failures: dict[str, Exception] = {}
        self.attach_id_override: Optional[str] = None
        self.calls: list[tuple[str, tuple]] = []
        self._ids = itertools.count(1)

    def _record(self, name: str, *args: object) -> None:
        self.calls.append((name, args))
        if name in self.failures:
            raise self.failures[name]

    def _new_id(self, prefix: str) -> str:
        return f"{prefix}_{next(self._ids)}"

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def mutating_calls(self) -> list[str]:
        return [name for name in self.call_names() if name in MUTATING_CALLS]

    # Seeding helpers

    def add_assistant(self, name: str, model: str = "gpt-4o", assistant_id: Optional[str] = None) -> str:
        assistant_id = assistant_id or self._new_id("asst")
        self.assistants[assistant_id] = RemoteAssistant(id=AssistantId(assistant_id), name=name, model=model)
        self.attachments[assistant_id] = []
        return assistant_id

    def add_attached_file(self, assistant_id: str, filename: str, file_id: Optional[str] = None) -> str:
        file_id = file_id or self._new_id("file")
        self.files[file_id] = RemoteFile(id=FileId(file_id), filename=filename)
        self.attachments.setdefault(assistant_id, []).append(file_id)
        return file_id

    # Assistants

    async def list_assistants(self, limit: int = DEFAULT_PAGE_SIZE) -> list[RemoteAssistant]:
        self._record("list_assistants", limit)
        return list(self.assistants.values())[:limit]

    async def create_assistant(self, name: str, model: str) -> RemoteAssistant:
        self._record("create_assistant", name, model)
        assistant_id = self.add_assistant(name, model)
        return self.assistants[assistant_id]

    async def update_assistant_instructions(self, assistant_id: AssistantId, instructions: str) -> RemoteAssistant:
        self._record("update_assistant_instructions", assistant_id, instructions)
        updated = self.assistants[assistant_id].model_copy(update={"instructions": instructions})
        self.assistants[assistant_id] = updated
        return updated

    async def delete_assistant(self, assistant_id: AssistantId) -> None:
        self._record("delete_assistant", assistant_id)
        del self.assistants[assistant_id]
        self.attachments.pop(assistant_id, None)

    # Account files

    async def list_files(self, limit: int = DEFAULT_PAGE_SIZE) -> list[RemoteFile]:
        self._record("list_files", limit)
        # Newest first, every page.
        return list(reversed(self.files.values()))

    async def create_file(self, path: Path) -> RemoteFile:
        self._record("create_file", path)
        file_id = self._new_id("file")
        self.files[file_id] = RemoteFile(id=FileId(file_id), filename=path.name)
        self.uploads[file_id] = path.read_bytes()
        return self.files[file_id]

    async def delete_file(self, file_id: FileId) -> None:
        self._record("delete_file", file_id)
        if file_id not in self.files:
            raise RemoteAPIError("delete file", "404 No such File object")
        del self.files[file_id]

    # Assistant file attachments

    async def list_assistant_files(
        self, assistant_id: AssistantId, limit: int = DEFAULT_PAGE_SIZE
    ) -> list[RemoteAssistantFile]:
        self._record("list_assistant_files", assistant_id, limit)
        return [RemoteAssistantFile(id=FileId(f), assistant_id=assistant_id) for f in self.attachments[assistant_id]]

    async def create_assistant_file(self, assistant_id: AssistantId, file_id: FileId) -> RemoteAssistantFile:
        self._record("create_assistant_file", assistant_id, file_id)
        self.attachments[assistant_id].append(file_id)
        return RemoteAssistantFile(id=FileId(self.attach_id_override or file_id), assistant_id=assistant_id)

    async def delete_assistant_file(self, assistant_id: AssistantId, file_id: FileId) -> None:
        self._record("delete_assistant_file", assistant_id, file_id)
        if file_id not in self.attachments[assistant_id]:
            raise RemoteAPIError("remove assistant file", "404 No such file attached")
        self.attachments[assistant_id].remove(file_id)

    # Threads, messages and runs

    async def create_thread(self) -> RemoteThread:
        self._record("create_thread")
        thread_id = self._new_id("thread")
        self.threads.add(thread_id)
        self.messages[thread_id] = []
        return RemoteThread(id=ThreadId(thread_id))

    async def retrieve_thread(self, thread_id: ThreadId) -> RemoteThread:
        self._record("retrieve_thread", thread_id)
        if thread_id not in self.threads:
            raise RemoteAPIError("retrieve thread", f"No thread found with id '{thread_id}'")
        return RemoteThread(id=thread_id)

    async def create_message(self, thread_id: ThreadId, content: str, role: str = "user") -> RemoteMessage:
        self._record("create_message", thread_id, content, role)
        message = RemoteMessage(
            id=self._new_id("msg"), role=role, content=[MessageContent(type="text", text=content)]
        )
        self.messages[thread_id].append(message)
        return message

    async def list_messages(self, thread_id: ThreadId, limit: int = 1, order: str = "desc") -> list[RemoteMessage]:
        self._record("list_messages", thread_id, limit, order)
        messages = self.messages[thread_id]
        ordered = list(reversed(messages)) if order == "desc" else list(messages)
        return ordered[:limit]

    async def create_run(self, thread_id: ThreadId, assistant_id: AssistantId) -> RemoteRun:
        self._record("create_run", thread_id, assistant_id)
        run = RemoteRun(id=RunId(self._new_id("run")), thread_id=thread_id, assistant_id=assistant_id, status="queued")
        self.runs[run.id] = run
        return run

    async def retrieve_run(self, thread_id: ThreadId, run_id: RunId) -> RemoteRun:
        self._record("retrieve_run", thread_id, run_id)
        status = self.run_statuses.pop(0) if len(self.run_statuses) > 1 else self.run_statuses[0]
        run = self.runs[run_id].model_copy(update={"status": status})
        if status == "completed" and self.runs[run_id].status != "completed":
            await self._append_reply(thread_id)
        self.runs[run_id] = run
        return run

    async def cancel_run(self, thread_id: ThreadId, run_id: RunId) -> RemoteRun:
        self._record("cancel_run", thread_id, run_id)
        run = self.runs[run_id].model_copy(update={"status": "cancelling"})
        self.runs[run_id] = run
        return run

    async def _append_reply(self, thread_id: str) -> None:
        self.messages[thread_id].append(
            RemoteMessage(
                id=self._new_id("msg"),
                role="assistant",
                content=[MessageContent(type="text", text=self.reply_text)],
            )
        )


@pytest.fixture
def fake_client():
    """Provide an empty in-memory remote service."""
    return FakeRemoteClient()


@pytest.fixture
def no_sleep():
    """An async sleep that records requested delays instead of waiting."""

    class RecordingSleep:
        def __init__(self) -> None:
            self.delays: list[float] = []

        async def __call__(self, delay: float) -> None:
            self.delays.append(delay)

    return RecordingSleep()


@pytest.fixture
def test_service_config():
    """Provide a test service configuration."""
    return ServiceConfig(
        openai_api_key="test-key",
        poll_interval=0.5,
        run_timeout=0,
    )


@pytest.fixture
def assistant_config():
    """Provide the configuration of a project with one bundle."""
    return AssistantConfig(
        name="buddy-01",
        model="gpt-4o-mini",
        instructions_file="instructions.md",
        file_bundles=[
            FileBundleSpec(bundle_name="source-code", src_dir="src", dst_ext="py", src_globs=["*.py"]),
        ],
    )


@pytest.fixture
def project_dir(tmp_path):
    """Create a project directory with buddy.toml, instructions and sources."""
    (tmp_path / "buddy.toml").write_text(
        """
name = "buddy-01"
model = "gpt-4o-mini"
instructions_file = "instructions.md"

[[file_bundles]]
bundle_name = "source-code"
src_dir = "src"
dst_ext = "py"
src_globs = ["*.py"]
""",
        encoding="utf-8",
    )
    (tmp_path / "instructions.md").write_text("You are a helpful buddy.\n", encoding="utf-8")
    src = tmp_path / "src"
    src.mkdir()
    (src / "a.py").write_text("print('a')\n", encoding="utf-8")
    (src / "b.py").write_text("print('b')\n", encoding="utf-8")
    return tmp_path
