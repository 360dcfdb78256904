"""Bounded background worker pool.

Jobs are zero-argument coroutine factories. Nothing is awaited by the
submitter; failures are logged and never retried.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import logfire

Job = Callable[[], Awaitable[None]]


@dataclass
class _QueuedJob:
    name: str
    job: Job


class WorkerPool:
    """Fixed number of asyncio workers consuming a bounded queue.

    Workers start lazily on the first submission, inside the running loop.
    ``stop`` either drains the queue or abandons pending jobs.
    """

    def __init__(self, name: str, workers: int = 4, max_queue: int = 1000) -> None:
        self.name = name
        self._worker_count = max(1, workers)
        self._queue: asyncio.Queue[_QueuedJob] = asyncio.Queue(maxsize=max_queue)
        self._workers: list[asyncio.Task[None]] = []
        self._closed = False

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._run(index), name=f"{self.name}-{index}")
            for index in range(self._worker_count)
        ]
        logfire.debug("Worker pool started", pool=self.name, workers=self._worker_count)

    def submit(self, name: str, job: Job) -> bool:
        """Queue a job without waiting.

        Returns:
            False if the pool is stopped or the queue is full (job dropped)
        """
        if self._closed:
            logfire.warn("Worker pool closed, job dropped", pool=self.name, job=name)
            return False
        self.start()
        try:
            self._queue.put_nowait(_QueuedJob(name=name, job=job))
        except asyncio.QueueFull:
            logfire.warn(
                "Worker pool queue full, job dropped", pool=self.name, job=name
            )
            return False
        return True

    async def join(self) -> None:
        """Wait until every queued job has finished."""
        await self._queue.join()

    async def stop(self, drain: bool = True, timeout: float | None = None) -> None:
        """Stop accepting jobs and shut the workers down.

        Args:
            drain: Finish queued jobs first; otherwise drop them
            timeout: Upper bound on draining, after which pending jobs are dropped
        """
        self._closed = True
        if drain and self._workers:
            try:
                await asyncio.wait_for(self._queue.join(), timeout=timeout)
            except asyncio.TimeoutError:
                logfire.warn(
                    "Worker pool drain timed out",
                    pool=self.name,
                    abandoned=self._queue.qsize(),
                )

        abandoned = 0
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
            abandoned += 1

        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logfire.info("Worker pool stopped", pool=self.name, abandoned=abandoned)

    async def _run(self, index: int) -> None:
        while True:
            queued = await self._queue.get()
            try:
                with logfire.span("worker_pool.job", pool=self.name, job=queued.name):
                    await queued.job()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logfire.error(
                    "Background job failed",
                    pool=self.name,
                    job=queued.name,
                    worker=index,
                    error=str(e),
                )
            finally:
                self._queue.task_done()
