"""Repository implementations for local project state."""

from .base import BaseConfigRepository, BaseConversationRepository
from .local import BUDDY_TOML, CONVERSATION_FILE, LocalConfigRepository, LocalConversationRepository

__all__ = [
    "BUDDY_TOML",
    "CONVERSATION_FILE",
    "BaseConfigRepository",
    "BaseConversationRepository",
    "LocalConfigRepository",
    "LocalConversationRepository",
]
