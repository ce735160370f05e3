"""Abstract base classes for repository implementations."""

import abc
from typing import Optional

from ..entities import AssistantConfig, Conversation


class BaseConfigRepository(abc.ABC):
    """Abstract base class for project configuration repositories."""

    @abc.abstractmethod
    def read_config(self) -> AssistantConfig:
        raise NotImplementedError


class BaseConversationRepository(abc.ABC):
    """Abstract base class for the persisted conversation record."""

    @abc.abstractmethod
    def load(self) -> Optional[Conversation]:
        raise NotImplementedError

    @abc.abstractmethod
    def save(self, conversation: Conversation) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def delete(self) -> bool:
        raise NotImplementedError
