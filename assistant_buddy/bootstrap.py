"""Factory functions for creating and configuring buddy components."""

from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .entities import IRemoteClient, ServiceConfig
from .errors import ConfigurationError
from .infrastructure import OpenAIClientFactory, OpenAIRemoteClient
from .repositories import (
    BaseConfigRepository,
    BaseConversationRepository,
    LocalConfigRepository,
    LocalConversationRepository,
)
from .services import AssistantLifecycleManager, ConversationManager, RunOrchestrator
from .services.run_orchestrator import PollCallback
from .structured_logging import get_logger

logger = get_logger("BOOTSTRAP")


def get_service_config() -> ServiceConfig:
    try:
        return ServiceConfig()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid environment configuration: {e}") from e


def get_remote_client(service_config: ServiceConfig) -> IRemoteClient:
    """Create the OpenAI remote client; fails without an API key."""
    logger.info("Creating OpenAI remote client")
    return OpenAIRemoteClient(OpenAIClientFactory.create_from_config(service_config))


def get_config_repository(project_dir: Path) -> BaseConfigRepository:
    return LocalConfigRepository(project_dir)


def get_conversation_repository(data_dir: Path) -> BaseConversationRepository:
    return LocalConversationRepository(data_dir)


def get_lifecycle_manager(client: IRemoteClient) -> AssistantLifecycleManager:
    return AssistantLifecycleManager(client)


def get_conversation_manager(client: IRemoteClient, data_dir: Path) -> ConversationManager:
    return ConversationManager(client, get_conversation_repository(data_dir))


def get_run_orchestrator(
    client: IRemoteClient, service_config: ServiceConfig, on_poll: Optional[PollCallback] = None
) -> RunOrchestrator:
    logger.info(
        "Creating run orchestrator",
        poll_interval=service_config.poll_interval,
        max_wait=service_config.max_run_wait,
    )
    return RunOrchestrator(
        client,
        poll_interval=service_config.poll_interval,
        max_wait=service_config.max_run_wait,
        on_poll=on_poll,
    )
