"""Error taxonomy and centralized error handling for buddy."""

from typing import Any, Awaitable

from openai import OpenAIError

from .entities import DeletionResult
from .structured_logging import get_logger

logger = get_logger("ERROR_HANDLERS")


class BuddyError(Exception):
    """Base class for every error buddy reports to the user."""


class ConfigurationError(BuddyError):
    """Local configuration is missing or invalid."""


class AuthenticationError(BuddyError):
    """No credential for the remote service."""


class RemoteAPIError(BuddyError):
    """A remote call failed; carries the upstream message."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"Failed to {operation}: {message}")
        self.operation = operation
        self.upstream_message = message


class BundleError(BuddyError):
    """A bundle could not be built from its source files."""


class ConversationNotFoundError(BuddyError):
    """The persisted conversation points at a thread that no longer exists."""


class RunFailedError(BuddyError):
    """A run ended in a terminal state other than completed."""

    def __init__(self, status: str):
        super().__init__(f"ERROR WHILE RUN: {status}")
        self.status = status


class RunTimeoutError(BuddyError):
    """A run did not reach a terminal state in time."""


class UnsupportedContentError(BuddyError):
    """The reply holds content other than text."""


class EmptyThreadError(BuddyError):
    """The thread has no message, or the message has no content."""


class ErrorHandler:
    """Centralized error handling utilities."""

    @staticmethod
    def handle_openai_error(err: OpenAIError, operation: str, **context: Any) -> RemoteAPIError:
        """Convert OpenAI errors to ``RemoteAPIError`` with consistent logging."""
        logger.error(
            f"OpenAI {operation} failed",
            error_type=type(err).__name__,
            error=str(err),
            **context,
        )
        return RemoteAPIError(operation, str(err))

    @staticmethod
    async def attempt_delete(resource: str, resource_id: str, deletion: Awaitable[None]) -> DeletionResult:
        """Await a deletion that is allowed to fail; the resource may already be gone.

        The failure is returned, not raised. Callers log the result and drop it.
        """
        try:
            await deletion
        except BuddyError as err:
            return DeletionResult.failed(resource, resource_id, err)
        return DeletionResult.ok(resource, resource_id)
