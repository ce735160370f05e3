"""Abstract base classes defining the remote service contract."""

from abc import ABC, abstractmethod
from pathlib import Path

from .remote import (
    DEFAULT_PAGE_SIZE,
    AssistantId,
    FileId,
    RemoteAssistant,
    RemoteAssistantFile,
    RemoteFile,
    RemoteMessage,
    RemoteRun,
    RemoteThread,
    RunId,
    ThreadId,
)


class IRemoteClient(ABC):
    """CRUD capability over remote assistants, files, threads, messages and runs.

    Every method raises ``RemoteAPIError`` when the remote call fails.
    """

    async def close(self) -> None:
        """Release transport resources."""
        return None

    # Assistants

    @abstractmethod
    async def list_assistants(self, limit: int = DEFAULT_PAGE_SIZE) -> list[RemoteAssistant]:
        """Return the first page of assistants, newest first."""
        pass

    @abstractmethod
    async def create_assistant(self, name: str, model: str) -> RemoteAssistant:
        pass

    @abstractmethod
    async def update_assistant_instructions(self, assistant_id: AssistantId, instructions: str) -> RemoteAssistant:
        """Replace the assistant instructions entirely."""
        pass

    @abstractmethod
    async def delete_assistant(self, assistant_id: AssistantId) -> None:
        pass

    # Account files

    @abstractmethod
    async def list_files(self, limit: int = DEFAULT_PAGE_SIZE) -> list[RemoteFile]:
        """Return every account file, fetched ``limit`` per request."""
        pass

    @abstractmethod
    async def create_file(self, path: Path) -> RemoteFile:
        """Upload the bytes of ``path`` under its base name."""
        pass

    @abstractmethod
    async def delete_file(self, file_id: FileId) -> None:
        pass

    # Assistant file attachments

    @abstractmethod
    async def list_assistant_files(
        self, assistant_id: AssistantId, limit: int = DEFAULT_PAGE_SIZE
    ) -> list[RemoteAssistantFile]:
        """Return every attachment of the assistant, fetched ``limit`` per request."""
        pass

    @abstractmethod
    async def create_assistant_file(self, assistant_id: AssistantId, file_id: FileId) -> RemoteAssistantFile:
        pass

    @abstractmethod
    async def delete_assistant_file(self, assistant_id: AssistantId, file_id: FileId) -> None:
        pass

    # Threads, messages and runs

    @abstractmethod
    async def create_thread(self) -> RemoteThread:
        pass

    @abstractmethod
    async def retrieve_thread(self, thread_id: ThreadId) -> RemoteThread:
        pass

    @abstractmethod
    async def create_message(self, thread_id: ThreadId, content: str, role: str = "user") -> RemoteMessage:
        pass

    @abstractmethod
    async def list_messages(self, thread_id: ThreadId, limit: int = 1, order: str = "desc") -> list[RemoteMessage]:
        pass

    @abstractmethod
    async def create_run(self, thread_id: ThreadId, assistant_id: AssistantId) -> RemoteRun:
        pass

    @abstractmethod
    async def retrieve_run(self, thread_id: ThreadId, run_id: RunId) -> RemoteRun:
        pass

    @abstractmethod
    async def cancel_run(self, thread_id: ThreadId, run_id: RunId) -> RemoteRun:
        pass
