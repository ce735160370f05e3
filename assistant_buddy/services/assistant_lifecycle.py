"""Keep exactly one remote assistant per configured name."""

from pathlib import Path
from typing import Optional

from ..entities import DEFAULT_PAGE_SIZE, AssistantConfig, AssistantId, IRemoteClient, RemoteAssistant
from ..errors import ErrorHandler
from ..structured_logging import get_logger
from ..utils.files import list_files, purge_stale_bundles
from .bundle_builder import build_bundle
from .file_reconciler import FileReconciler

logger = get_logger("ASSISTANT_LIFECYCLE")


class AssistantLifecycleManager:
    """Looks up, creates and recreates assistants, and pushes their instructions and files."""

    def __init__(
        self,
        client: IRemoteClient,
        reconciler: Optional[FileReconciler] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.client = client
        self.reconciler = reconciler or FileReconciler(client)
        self.page_size = page_size

    async def first_by_name(self, name: str) -> Optional[RemoteAssistant]:
        """Return the first assistant named ``name`` on the first listing page.

        Only one page is scanned. A full page means the lookup may have missed
        an assistant further down, which is logged.
        """
        assistants = await self.client.list_assistants(limit=self.page_size)
        if len(assistants) >= self.page_size:
            logger.warning(
                "Assistant listing page is full, lookup by name may be incomplete",
                name=name,
                page_size=self.page_size,
            )
        return next((a for a in assistants if a.name == name), None)

    async def ensure_assistant(self, config: AssistantConfig, recreate: bool = False) -> AssistantId:
        existing = await self.first_by_name(config.name)
        assistant_id = existing.id if existing else None

        if recreate and assistant_id is not None:
            await self.delete(assistant_id)
            logger.info("Assistant deleted", name=config.name, assistant_id=assistant_id)
            assistant_id = None

        if assistant_id is None:
            created = await self.client.create_assistant(name=config.name, model=config.model)
            assistant_id = created.id
            logger.info("Assistant created", name=config.name, assistant_id=assistant_id)

        logger.info("Assistant loaded", name=config.name, assistant_id=assistant_id)
        return assistant_id

    async def delete(self, assistant_id: AssistantId) -> None:
        """Delete the assistant's files, then the assistant.

        Attachment records go away with the assistant.
        """
        index = await self.reconciler.build_file_index(assistant_id)
        for file_name, file_id in index.items():
            result = await ErrorHandler.attempt_delete("file", file_id, self.client.delete_file(file_id))
            if result.deleted:
                logger.info("File deleted", file_name=file_name, file_id=file_id)
            else:
                logger.warning("Can't delete file", file_name=file_name, file_id=file_id, cause=result.error)

        await self.client.delete_assistant(assistant_id)

    async def upload_instructions(self, assistant_id: AssistantId, instructions: str) -> None:
        """Overwrite the remote instructions."""
        await self.client.update_assistant_instructions(assistant_id, instructions)
        logger.info("Instructions uploaded", assistant_id=assistant_id, length=len(instructions))

    async def upload_file(self, assistant_id: AssistantId, file: Path, force: bool) -> bool:
        _, uploaded = await self.reconciler.resolve_remote_file(assistant_id, file, force)
        return uploaded

    async def sync_bundles(
        self,
        assistant_id: AssistantId,
        config: AssistantConfig,
        project_dir: Path,
        files_dir: Path,
        recreate: bool = False,
    ) -> int:
        """Rebuild every configured bundle and reconcile it with the assistant.

        Bundles are processed one after the other. A bundle whose source dir
        is missing or matches no file is skipped. Returns the upload count.
        """
        purge_stale_bundles(files_dir, [b.dst_ext for b in config.file_bundles], keep_marker=assistant_id)

        num_uploaded = 0
        for bundle in config.file_bundles:
            src_dir = project_dir / bundle.src_dir
            if not src_dir.is_dir():
                logger.warning("Bundle source dir not found", bundle=bundle.bundle_name, src_dir=str(src_dir))
                continue

            files = list_files(src_dir, bundle.src_globs)
            if not files:
                logger.info("Bundle has no source files, skipped", bundle=bundle.bundle_name)
                continue

            bundle_file = files_dir / bundle_file_name(config.name, bundle.bundle_name, assistant_id, bundle.dst_ext)

            # A bundle file missing locally was never uploaded for this assistant.
            force = recreate or not bundle_file.exists()

            build_bundle(files, bundle_file)

            if await self.upload_file(assistant_id, bundle_file, force):
                num_uploaded += 1

        return num_uploaded


def bundle_file_name(assistant_name: str, bundle_name: str, assistant_id: AssistantId, dst_ext: str) -> str:
    return f"{assistant_name}-{bundle_name}-bundle-{assistant_id}.{dst_ext}"
