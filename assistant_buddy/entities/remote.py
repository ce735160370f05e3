"""Records exchanged with the remote assistant service."""

from enum import Enum
from typing import NewType, Optional

from pydantic import BaseModel, ConfigDict, Field

AssistantId = NewType("AssistantId", str)
ThreadId = NewType("ThreadId", str)
FileId = NewType("FileId", str)
RunId = NewType("RunId", str)

# Remote display name -> file id, rebuilt on every query.
RemoteFileIndex = dict[str, FileId]

DEFAULT_PAGE_SIZE = 100


class RunStatus(str, Enum):
    """Statuses a remote run can report."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    REQUIRES_ACTION = "requires_action"
    CANCELLING = "cancelling"
    CANCELLED = "cancelled"
    FAILED = "failed"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    EXPIRED = "expired"


class RemoteAssistant(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: AssistantId
    name: Optional[str] = None
    model: str = ""
    instructions: Optional[str] = None


class RemoteFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: FileId
    filename: str


class RemoteAssistantFile(BaseModel):
    """A file attachment record; carries the id only, never the name."""

    model_config = ConfigDict(frozen=True)

    id: FileId
    assistant_id: AssistantId


class RemoteThread(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: ThreadId


class RemoteRun(BaseModel):
    """A run as last seen; ``status`` stays a raw string so unknown values survive."""

    model_config = ConfigDict(frozen=True)

    id: RunId
    thread_id: ThreadId
    assistant_id: AssistantId
    status: str


class MessageContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    text: Optional[str] = None


class RemoteMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    role: str
    content: list[MessageContent] = Field(default_factory=list)


class DeletionResult(BaseModel):
    """Outcome of one best-effort deletion; the caller logs it and moves on."""

    model_config = ConfigDict(frozen=True)

    resource: str
    resource_id: str
    deleted: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls, resource: str, resource_id: str) -> "DeletionResult":
        return cls(resource=resource, resource_id=resource_id, deleted=True)

    @classmethod
    def failed(cls, resource: str, resource_id: str, error: Exception) -> "DeletionResult":
        return cls(resource=resource, resource_id=resource_id, deleted=False, error=str(error))
