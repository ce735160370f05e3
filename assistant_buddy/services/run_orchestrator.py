"""Drive a run on a thread to completion and read the reply."""

import asyncio
from typing import Awaitable, Callable, Optional

from ..entities import AssistantId, IRemoteClient, RemoteRun, RunStatus, ThreadId
from ..errors import EmptyThreadError, RemoteAPIError, RunFailedError, RunTimeoutError, UnsupportedContentError
from ..structured_logging import get_logger, get_or_create_correlation_id

logger = get_logger("RUN_ORCHESTRATOR")

POLLING_INTERVAL = 0.5

# The only statuses that keep the loop going.
PENDING_STATUSES = {RunStatus.QUEUED.value, RunStatus.IN_PROGRESS.value}

Sleep = Callable[[float], Awaitable[None]]
PollCallback = Callable[[RemoteRun], None]


class RunOrchestrator:
    """Posts a user message, starts a run and polls it at a fixed interval.

    ``sleep`` is injectable so tests can step through polls without waiting.
    ``max_wait`` bounds the polling; None polls until a terminal status.
    """

    def __init__(
        self,
        client: IRemoteClient,
        poll_interval: float = POLLING_INTERVAL,
        max_wait: Optional[float] = None,
        sleep: Sleep = asyncio.sleep,
        on_poll: Optional[PollCallback] = None,
    ):
        self.client = client
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self.sleep = sleep
        self.on_poll = on_poll

    async def send_and_await_reply(self, assistant_id: AssistantId, thread_id: ThreadId, message: str) -> str:
        correlation_id = get_or_create_correlation_id()

        await self.client.create_message(thread_id, message, role="user")
        run = await self.client.create_run(thread_id, assistant_id)
        logger.info(
            "Run created", thread_id=thread_id, run_id=run.id, assistant_id=assistant_id, correlation_id=correlation_id
        )

        run = await self.await_run(run)
        logger.info("Run completed", thread_id=thread_id, run_id=run.id, correlation_id=correlation_id)
        return await self.latest_message_text(thread_id)

    async def await_run(self, run: RemoteRun) -> RemoteRun:
        """Poll ``run`` until it completes.

        Raises:
            RunFailedError: on any terminal status other than completed.
            RunTimeoutError: when ``max_wait`` elapses first.
        """
        waited = 0.0
        while True:
            run = await self.client.retrieve_run(run.thread_id, run.id)
            if self.on_poll is not None:
                self.on_poll(run)

            if run.status == RunStatus.COMPLETED:
                return run
            if run.status not in PENDING_STATUSES:
                logger.error("Run ended without completing", run_id=run.id, status=run.status)
                raise RunFailedError(run.status)

            if self.max_wait is not None and waited >= self.max_wait:
                await self._cancel(run)
                raise RunTimeoutError(f"Run {run.id} still '{run.status}' after {waited:g}s, cancelled")

            await self.sleep(self.poll_interval)
            waited += self.poll_interval

    async def latest_message_text(self, thread_id: ThreadId) -> str:
        messages = await self.client.list_messages(thread_id, limit=1, order="desc")
        if not messages:
            raise EmptyThreadError("No message found")

        message = messages[0]
        if not message.content:
            raise EmptyThreadError("No message content found")

        content = message.content[0]
        if content.type != "text" or content.text is None:
            raise UnsupportedContentError(f"Message content '{content.type}' not supported yet")
        return content.text

    async def _cancel(self, run: RemoteRun) -> None:
        try:
            await self.client.cancel_run(run.thread_id, run.id)
            logger.warning("Run cancelled", run_id=run.id, thread_id=run.thread_id)
        except RemoteAPIError as err:
            logger.error("Failed to cancel run", run_id=run.id, thread_id=run.thread_id, error=str(err))
