import asyncio
from typing import Callable, Optional
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool
from ipsguard.core.database import SessionLocal
from ipsguard.core.logger import logger
from ipsguard.config import settings

BookkeepingJob = Callable[[Session], None]


class BookkeepingQueue:
    """Bounded queue of persistence jobs drained by one worker task.

    Jobs run off the request path, each in the threadpool with its own
    session. Failures are logged and rolled back; a full queue drops the job.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal, maxsize: int = None):
        self.session_factory = session_factory
        self.maxsize = maxsize or settings.bookkeeping_queue_size
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None
        self.dropped = 0

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        if self.running:
            return
        self._queue = asyncio.Queue(maxsize=self.maxsize)
        self._worker = asyncio.create_task(self._run())
        logger.info("bookkeeping_started", maxsize=self.maxsize)

    async def stop(self) -> None:
        if self._worker is None:
            return
        await self._queue.join()
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        logger.info("bookkeeping_stopped", dropped=self.dropped)

    async def join(self) -> None:
        if self._queue is not None:
            await self._queue.join()

    def submit(self, name: str, job: BookkeepingJob) -> bool:
        if self._queue is None:
            logger.error("bookkeeping_not_started", job=name)
            self.dropped += 1
            return False
        try:
            self._queue.put_nowait((name, job))
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning("bookkeeping_queue_full", job=name, dropped=self.dropped)
            return False
        return True

    async def _run(self) -> None:
        while True:
            name, job = await self._queue.get()
            try:
                await run_in_threadpool(self.run_job, name, job)
            finally:
                self._queue.task_done()

    def run_job(self, name: str, job: BookkeepingJob) -> bool:
        db = None
        try:
            db = self.session_factory()
            job(db)
            return True
        except Exception as e:
            if db is not None:
                db.rollback()
            logger.error("bookkeeping_job_failed", job=name, error=str(e))
            return False
        finally:
            if db is not None:
                db.close()
