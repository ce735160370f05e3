"""Local file-system implementations of repositories."""

import tomllib
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..entities import AssistantConfig, Conversation
from ..errors import ConfigurationError
from ..structured_logging import get_logger
from .base import BaseConfigRepository, BaseConversationRepository

logger = get_logger("REPOSITORIES")

BUDDY_TOML = "buddy.toml"
CONVERSATION_FILE = "conv.json"


class LocalConfigRepository(BaseConfigRepository):
    """Reads ``buddy.toml`` from a project directory."""

    def __init__(self, project_dir: Path):
        self.config_file = Path(project_dir) / BUDDY_TOML

    def read_config(self) -> AssistantConfig:
        if not self.config_file.is_file():
            raise ConfigurationError(f"Config file not found: {self.config_file}")
        try:
            with open(self.config_file, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in config file '{self.config_file}': {e}") from e
        try:
            config = AssistantConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in '{self.config_file}': {e}") from e
        logger.info("Configuration loaded", config_file=str(self.config_file), assistant_name=config.name)
        return config


class LocalConversationRepository(BaseConversationRepository):
    """Keeps the conversation record as one JSON document, rewritten whole."""

    def __init__(self, data_dir: Path):
        self.conversation_file = Path(data_dir) / CONVERSATION_FILE

    def load(self) -> Optional[Conversation]:
        if not self.conversation_file.is_file():
            return None
        try:
            return Conversation.model_validate_json(self.conversation_file.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("Ignoring unreadable conversation record", path=str(self.conversation_file), error=str(e))
            return None

    def save(self, conversation: Conversation) -> None:
        self.conversation_file.parent.mkdir(parents=True, exist_ok=True)
        self.conversation_file.write_text(conversation.model_dump_json(indent=2), encoding="utf-8")

    def delete(self) -> bool:
        if not self.conversation_file.exists():
            return False
        self.conversation_file.unlink()
        return True
