"""
Bounded worker pool for fire-and-forget notification delivery.

Callers submit and move on; a fixed number of worker tasks drain the queue.
A delivery failure is logged with the correlation id of the request that
submitted it and goes no further.
"""
import asyncio
from dataclasses import dataclass
from typing import List, Optional

import structlog

from ..core.context import current_correlation_id
from ..core.logging import mask_email
from ..interfaces.notifier_interface import INotificationDispatcher, INotifier, NotificationKind

logger = structlog.get_logger()


@dataclass(frozen=True)
class NotificationJob:
    address: str
    kind: NotificationKind
    code: str
    correlation_id: Optional[str] = None


class NotificationDispatcher(INotificationDispatcher):
    """asyncio.Queue drained by ``workers`` tasks."""

    def __init__(self, notifier: INotifier, workers: int = 2, queue_size: int = 1000):
        self.notifier = notifier
        self.worker_count = workers
        self._queue: asyncio.Queue[NotificationJob] = asyncio.Queue(maxsize=queue_size)
        self._workers: List[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._workers)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._worker(i), name=f"notifier-worker-{i}")
            for i in range(self.worker_count)
        ]
        logger.info("Notification dispatcher started", workers=self.worker_count)

    def submit(self, address: str, kind: NotificationKind, code: str) -> None:
        job = NotificationJob(
            address=address,
            kind=kind,
            code=code,
            correlation_id=current_correlation_id(),
        )
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            logger.error(
                "Notification queue full, message dropped",
                kind=kind.value,
                to=mask_email(address),
            )

    async def drain(self) -> None:
        """Wait until every queued job has been attempted."""
        await self._queue.join()

    async def stop(self, timeout: float = 5.0) -> None:
        if not self._workers:
            return
        try:
            await asyncio.wait_for(self.drain(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Notification queue not drained before shutdown", pending=self.pending)

        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("Notification dispatcher stopped")

    async def _worker(self, index: int) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self.notifier.send(job.address, job.kind, job.code)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(
                    "Failed to send notification",
                    kind=job.kind.value,
                    to=mask_email(job.address),
                    correlation_id=job.correlation_id,
                    worker=index,
                    error=str(e),
                )
            finally:
                self._queue.task_done()
