"""One remote thread per project, resumed across sessions."""

from ..entities import Conversation, IRemoteClient
from ..errors import ConversationNotFoundError, RemoteAPIError
from ..repositories import BaseConversationRepository
from ..structured_logging import get_logger

logger = get_logger("CONVERSATION_MANAGER")


class ConversationManager:
    def __init__(self, client: IRemoteClient, repository: BaseConversationRepository):
        self.client = client
        self.repository = repository

    async def ensure_conversation(self, recreate: bool = False) -> Conversation:
        """Load the persisted conversation, or start and persist a new one.

        A persisted thread that no longer exists remotely is an error, a new
        thread is not created in its place.
        """
        if recreate and self.repository.delete():
            logger.info("Conversation record removed")

        conversation = self.repository.load()
        if conversation is not None:
            try:
                await self.client.retrieve_thread(conversation.thread_id)
            except RemoteAPIError as err:
                raise ConversationNotFoundError(
                    f"Cannot find thread_id for {conversation!r}: {err.upstream_message}"
                ) from err
            logger.info("Conversation loaded", thread_id=conversation.thread_id)
            return conversation

        thread = await self.client.create_thread()
        conversation = Conversation(thread_id=thread.id)
        self.repository.save(conversation)
        logger.info("Conversation created", thread_id=conversation.thread_id)
        return conversation
