"""Locally persisted conversation record."""

from pydantic import BaseModel

from .remote import ThreadId


class Conversation(BaseModel):
    """The remote thread a project directory talks to."""

    thread_id: ThreadId
