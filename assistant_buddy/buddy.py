"""A buddy: one project directory bound to one remote assistant."""

from pathlib import Path
from typing import Optional

from . import bootstrap
from .entities import AssistantConfig, AssistantId, Conversation, IRemoteClient, ServiceConfig
from .errors import ConfigurationError
from .services import AssistantLifecycleManager, ConversationManager, RunOrchestrator
from .services.run_orchestrator import PollCallback
from .structured_logging import CorrelationContext, get_logger
from .utils.files import ensure_dir

logger = get_logger("BUDDY")

DATA_DIR = ".buddy"
FILES_DIR = "files"


class Buddy:
    """Keeps the remote assistant of a project in sync and chats through it."""

    def __init__(
        self,
        dir: Path,
        client: IRemoteClient,
        assistant_id: AssistantId,
        config: AssistantConfig,
        lifecycle: AssistantLifecycleManager,
        orchestrator: RunOrchestrator,
    ):
        self.dir = dir
        self.client = client
        self.assistant_id = assistant_id
        self.config = config
        self.lifecycle = lifecycle
        self.orchestrator = orchestrator
        self.conversations = bootstrap.get_conversation_manager(client, self.data_dir())

    @property
    def name(self) -> str:
        return self.config.name

    @classmethod
    async def init_from_dir(
        cls,
        dir: Path,
        recreate_assistant: bool = False,
        service_config: Optional[ServiceConfig] = None,
        client: Optional[IRemoteClient] = None,
        on_poll: Optional[PollCallback] = None,
    ) -> "Buddy":
        """Load ``buddy.toml`` from ``dir``, then sync the assistant with it.

        The assistant is looked up or created, then its instructions and file
        bundles are uploaded.
        """
        dir = Path(dir)
        service_config = service_config or bootstrap.get_service_config()

        config = bootstrap.get_config_repository(dir).read_config()
        client = client or bootstrap.get_remote_client(service_config)

        lifecycle = bootstrap.get_lifecycle_manager(client)
        assistant_id = await lifecycle.ensure_assistant(config, recreate=recreate_assistant)

        buddy = cls(
            dir=dir,
            client=client,
            assistant_id=assistant_id,
            config=config,
            lifecycle=lifecycle,
            orchestrator=bootstrap.get_run_orchestrator(client, service_config, on_poll=on_poll),
        )

        await buddy.upload_instructions()
        await buddy.upload_files(False)

        return buddy

    async def upload_instructions(self) -> bool:
        """Push the instructions file. Returns False when there is none."""
        file = self.config.instructions_path(self.dir)
        if file is None or not file.is_file():
            logger.info("No instructions file, skipped", instructions_file=self.config.instructions_file)
            return False

        try:
            instructions = file.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ConfigurationError(f"Instructions file '{file}' is not valid UTF-8: {e}") from e

        await self.lifecycle.upload_instructions(self.assistant_id, instructions)
        return True

    async def upload_files(self, recreate: bool = False) -> int:
        """Rebuild the bundles under ``.buddy/files`` and upload the ones needed."""
        return await self.lifecycle.sync_bundles(
            self.assistant_id,
            self.config,
            project_dir=self.dir,
            files_dir=self.data_files_dir(),
            recreate=recreate,
        )

    async def load_or_create_conv(self, recreate: bool = False) -> Conversation:
        return await self.conversations.ensure_conversation(recreate)

    async def chat(self, conv: Conversation, msg: str) -> str:
        with CorrelationContext():
            return await self.orchestrator.send_and_await_reply(self.assistant_id, conv.thread_id, msg)

    async def close(self) -> None:
        await self.client.close()

    def data_dir(self) -> Path:
        data_dir = self.dir / DATA_DIR
        ensure_dir(data_dir)
        return data_dir

    def data_files_dir(self) -> Path:
        dir = self.data_dir() / FILES_DIR
        ensure_dir(dir)
        return dir
