"""Infrastructure adapters for remote services."""

from .openai_client import OpenAIClientFactory, OpenAIRemoteClient

__all__ = ["OpenAIClientFactory", "OpenAIRemoteClient"]
