"""Data entities for buddy."""

from .config import AssistantConfig, FileBundleSpec, ServiceConfig
from .conversation import Conversation
from .interfaces import IRemoteClient
from .remote import (
    DEFAULT_PAGE_SIZE,
    AssistantId,
    DeletionResult,
    FileId,
    MessageContent,
    RemoteAssistant,
    RemoteAssistantFile,
    RemoteFile,
    RemoteFileIndex,
    RemoteMessage,
    RemoteRun,
    RemoteThread,
    RunId,
    RunStatus,
    ThreadId,
)

__all__ = [
    "AssistantConfig",
    "FileBundleSpec",
    "ServiceConfig",
    "Conversation",
    "IRemoteClient",
    "DEFAULT_PAGE_SIZE",
    "AssistantId",
    "ThreadId",
    "FileId",
    "RunId",
    "RunStatus",
    "RemoteFileIndex",
    "RemoteAssistant",
    "RemoteAssistantFile",
    "RemoteFile",
    "RemoteThread",
    "RemoteRun",
    "RemoteMessage",
    "MessageContent",
    "DeletionResult",
]
