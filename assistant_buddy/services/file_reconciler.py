"""Match local knowledge files against the files attached to an assistant."""

from pathlib import Path

from ..entities import AssistantId, FileId, IRemoteClient, RemoteFileIndex
from ..errors import ErrorHandler
from ..structured_logging import get_logger

logger = get_logger("FILE_RECONCILER")


class FileReconciler:
    """Decides whether a local file must be uploaded, replaced or left alone.

    Remote files are matched by display name. The index is rebuilt on every
    call because uploads and deletions change it.
    """

    def __init__(self, client: IRemoteClient):
        self.client = client

    async def build_file_index(self, assistant_id: AssistantId) -> RemoteFileIndex:
        """Return display name -> file id for the files attached to the assistant."""
        # Attachment records carry ids only, names come from the account files.
        attached = await self.client.list_assistant_files(assistant_id)
        attached_ids = {f.id for f in attached}

        account_files = await self.client.list_files()

        return {f.filename: f.id for f in account_files if f.id in attached_ids}

    async def resolve_remote_file(self, assistant_id: AssistantId, local_file: Path, force: bool) -> tuple[FileId, bool]:
        """Make sure ``local_file`` is attached to the assistant.

        Returns the remote file id and whether an upload happened.
        """
        file_name = local_file.name
        index = await self.build_file_index(assistant_id)
        existing_id = index.get(file_name)

        if existing_id is not None and not force:
            logger.debug("File already attached", file_name=file_name, file_id=existing_id)
            return existing_id, False

        if existing_id is not None:
            await self._remove_old_file(assistant_id, existing_id, file_name)

        logger.info("Uploading file", file_name=file_name, assistant_id=assistant_id)
        uploaded = await self.client.create_file(local_file)
        attached = await self.client.create_assistant_file(assistant_id, uploaded.id)

        if uploaded.id != attached.id:
            logger.error(
                "SHOULD NOT HAPPEN, file id not matching",
                uploaded_file_id=uploaded.id,
                attached_file_id=attached.id,
                file_name=file_name,
            )

        logger.info("Uploaded file", file_name=file_name, file_id=attached.id)
        return attached.id, True

    async def _remove_old_file(self, assistant_id: AssistantId, file_id: FileId, file_name: str) -> None:
        # Either may already be gone; failures are logged and dropped.
        for result in (
            await ErrorHandler.attempt_delete("file", file_id, self.client.delete_file(file_id)),
            await ErrorHandler.attempt_delete(
                "assistant file", file_id, self.client.delete_assistant_file(assistant_id, file_id)
            ),
        ):
            if not result.deleted:
                logger.warning(
                    f"Can't remove {result.resource} '{file_name}'", file_id=file_id, cause=result.error
                )
