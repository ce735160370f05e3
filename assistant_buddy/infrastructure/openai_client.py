"""OpenAI implementation of the remote client and its factory."""

from pathlib import Path
from typing import Any, Awaitable, Optional, TypeVar

from openai import AsyncOpenAI, OpenAIError

from ..entities import (
    DEFAULT_PAGE_SIZE,
    AssistantId,
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
from ..errors import AuthenticationError, ErrorHandler, RemoteAPIError
from ..structured_logging import get_logger

logger = get_logger("OPENAI_CLIENT")

T = TypeVar("T")

FILE_PURPOSE = "assistants"


class OpenAIClientFactory:
    """Factory for creating AsyncOpenAI client instances."""

    @staticmethod
    def create_client(api_key: Optional[str] = None) -> AsyncOpenAI:
        client = AsyncOpenAI(api_key=api_key)
        logger.debug("OpenAI client created")
        return client

    @staticmethod
    def create_from_config(config: ServiceConfig) -> AsyncOpenAI:
        """Create a client, refusing to start without an API key."""
        if not config.has_api_key:
            raise AuthenticationError("No OPENAI_API_KEY env variable. Please set it.")
        return OpenAIClientFactory.create_client(config.openai_api_key)


def _to_message(message: Any) -> RemoteMessage:
    content = []
    for block in message.content:
        if block.type == "text":
            content.append(MessageContent(type="text", text=block.text.value))
        else:
            content.append(MessageContent(type=block.type))
    return RemoteMessage(id=message.id, role=message.role, content=content)


def _to_run(run: Any) -> RemoteRun:
    return RemoteRun(id=run.id, thread_id=run.thread_id, assistant_id=run.assistant_id, status=str(run.status))


class OpenAIRemoteClient(IRemoteClient):
    """Remote client backed by the OpenAI Assistants API.

    Assistant file attachments live in the vector store referenced by the
    assistant's ``file_search`` tool resource. Attachment ids are file ids.
    """

    def __init__(self, client: AsyncOpenAI):
        self.client = client
        self._vector_store_ids: dict[AssistantId, str] = {}

    async def _call(self, operation: str, request: Awaitable[T], **context: Any) -> T:
        try:
            return await request
        except OpenAIError as err:
            raise ErrorHandler.handle_openai_error(err, operation, **context) from err

    async def _vector_store_id(self, assistant_id: AssistantId) -> str:
        """Return the assistant's vector store, creating one when it has none."""
        if assistant_id in self._vector_store_ids:
            return self._vector_store_ids[assistant_id]

        assistant = await self._call(
            "retrieve assistant", self.client.beta.assistants.retrieve(assistant_id), assistant_id=assistant_id
        )
        file_search = assistant.tool_resources.file_search if assistant.tool_resources else None
        if file_search and file_search.vector_store_ids:
            vector_store_id = file_search.vector_store_ids[0]
        else:
            vector_store_id = await self._create_vector_store(assistant.name or assistant_id)
            await self._call(
                "update assistant",
                self.client.beta.assistants.update(
                    assistant_id,
                    tools=[{"type": "file_search"}],
                    tool_resources={"file_search": {"vector_store_ids": [vector_store_id]}},
                ),
                assistant_id=assistant_id,
            )
        self._vector_store_ids[assistant_id] = vector_store_id
        return vector_store_id

    async def _create_vector_store(self, name: str) -> str:
        vector_store = await self._call("create vector store", self.client.vector_stores.create(name=f"{name}-files"))
        logger.info("Vector store created", vector_store_id=vector_store.id)
        return vector_store.id

    async def _delete_vector_store(self, vector_store_id: str) -> None:
        result = await ErrorHandler.attempt_delete(
            "vector store",
            vector_store_id,
            self._call("delete vector store", self.client.vector_stores.delete(vector_store_id)),
        )
        if not result.deleted:
            logger.warning("Can't delete vector store", vector_store_id=vector_store_id, cause=result.error)

    # Assistants

    async def list_assistants(self, limit: int = DEFAULT_PAGE_SIZE) -> list[RemoteAssistant]:
        page = await self._call("list assistants", self.client.beta.assistants.list(limit=limit, order="desc"))
        return [
            RemoteAssistant(id=a.id, name=a.name, model=a.model, instructions=a.instructions) for a in page.data
        ]

    async def create_assistant(self, name: str, model: str) -> RemoteAssistant:
        vector_store_id = await self._create_vector_store(name)
        try:
            assistant = await self._call(
                "create assistant",
                self.client.beta.assistants.create(
                    name=name,
                    model=model,
                    tools=[{"type": "file_search"}],
                    tool_resources={"file_search": {"vector_store_ids": [vector_store_id]}},
                ),
                name=name,
                model=model,
            )
        except RemoteAPIError:
            await self._delete_vector_store(vector_store_id)
            raise
        self._vector_store_ids[assistant.id] = vector_store_id
        logger.info("Assistant created", assistant_id=assistant.id, name=name)
        return RemoteAssistant(id=assistant.id, name=assistant.name, model=assistant.model)

    async def update_assistant_instructions(self, assistant_id: AssistantId, instructions: str) -> RemoteAssistant:
        assistant = await self._call(
            "update assistant",
            self.client.beta.assistants.update(assistant_id, instructions=instructions),
            assistant_id=assistant_id,
        )
        return RemoteAssistant(
            id=assistant.id, name=assistant.name, model=assistant.model, instructions=assistant.instructions
        )

    async def delete_assistant(self, assistant_id: AssistantId) -> None:
        await self._delete_vector_store(await self._vector_store_id(assistant_id))
        await self._call(
            "delete assistant", self.client.beta.assistants.delete(assistant_id), assistant_id=assistant_id
        )
        self._vector_store_ids.pop(assistant_id, None)

    # Account files

    async def list_files(self, limit: int = DEFAULT_PAGE_SIZE) -> list[RemoteFile]:
        files = []
        try:
            # The paginator requests further pages as iteration goes.
            async for f in self.client.files.list(purpose=FILE_PURPOSE, limit=limit):
                files.append(RemoteFile(id=f.id, filename=f.filename))
        except OpenAIError as err:
            raise ErrorHandler.handle_openai_error(err, "list files") from err
        return files

    async def create_file(self, path: Path) -> RemoteFile:
        file = await self._call(
            "upload file",
            self.client.files.create(file=(path.name, path.read_bytes()), purpose=FILE_PURPOSE),
            file_name=path.name,
        )
        return RemoteFile(id=file.id, filename=file.filename)

    async def delete_file(self, file_id: FileId) -> None:
        await self._call("delete file", self.client.files.delete(file_id), file_id=file_id)

    # Assistant file attachments

    async def list_assistant_files(
        self, assistant_id: AssistantId, limit: int = DEFAULT_PAGE_SIZE
    ) -> list[RemoteAssistantFile]:
        vector_store_id = await self._vector_store_id(assistant_id)
        attached = []
        try:
            async for f in self.client.vector_stores.files.list(vector_store_id=vector_store_id, limit=limit):
                attached.append(RemoteAssistantFile(id=f.id, assistant_id=assistant_id))
        except OpenAIError as err:
            raise ErrorHandler.handle_openai_error(err, "list assistant files", assistant_id=assistant_id) from err
        return attached

    async def create_assistant_file(self, assistant_id: AssistantId, file_id: FileId) -> RemoteAssistantFile:
        vector_store_id = await self._vector_store_id(assistant_id)
        attached = await self._call(
            "attach file",
            self.client.vector_stores.files.create(vector_store_id=vector_store_id, file_id=file_id),
            assistant_id=assistant_id,
            file_id=file_id,
        )
        return RemoteAssistantFile(id=attached.id, assistant_id=assistant_id)

    async def delete_assistant_file(self, assistant_id: AssistantId, file_id: FileId) -> None:
        vector_store_id = await self._vector_store_id(assistant_id)
        await self._call(
            "remove assistant file",
            self.client.vector_stores.files.delete(file_id, vector_store_id=vector_store_id),
            assistant_id=assistant_id,
            file_id=file_id,
        )

    # Threads, messages and runs

    async def create_thread(self) -> RemoteThread:
        thread = await self._call("create thread", self.client.beta.threads.create())
        return RemoteThread(id=thread.id)

    async def retrieve_thread(self, thread_id: ThreadId) -> RemoteThread:
        thread = await self._call(
            "retrieve thread", self.client.beta.threads.retrieve(thread_id), thread_id=thread_id
        )
        return RemoteThread(id=thread.id)

    async def create_message(self, thread_id: ThreadId, content: str, role: str = "user") -> RemoteMessage:
        message = await self._call(
            "create message",
            self.client.beta.threads.messages.create(thread_id=thread_id, role=role, content=content),
            thread_id=thread_id,
        )
        return _to_message(message)

    async def list_messages(self, thread_id: ThreadId, limit: int = 1, order: str = "desc") -> list[RemoteMessage]:
        page = await self._call(
            "list messages",
            self.client.beta.threads.messages.list(thread_id=thread_id, limit=limit, order=order),
            thread_id=thread_id,
        )
        return [_to_message(m) for m in page.data]

    async def create_run(self, thread_id: ThreadId, assistant_id: AssistantId) -> RemoteRun:
        run = await self._call(
            "create run",
            self.client.beta.threads.runs.create(thread_id=thread_id, assistant_id=assistant_id),
            thread_id=thread_id,
            assistant_id=assistant_id,
        )
        return _to_run(run)

    async def retrieve_run(self, thread_id: ThreadId, run_id: RunId) -> RemoteRun:
        run = await self._call(
            "retrieve run",
            self.client.beta.threads.runs.retrieve(thread_id=thread_id, run_id=run_id),
            thread_id=thread_id,
            run_id=run_id,
        )
        return _to_run(run)

    async def cancel_run(self, thread_id: ThreadId, run_id: RunId) -> RemoteRun:
        run = await self._call(
            "cancel run",
            self.client.beta.threads.runs.cancel(thread_id=thread_id, run_id=run_id),
            thread_id=thread_id,
            run_id=run_id,
        )
        return _to_run(run)

    async def close(self) -> None:
        await self.client.close()
