"""Bounded-concurrency executor for one pipeline stage.

Tasks are spawned eagerly on submit and wait on the stage's semaphore before
doing any work. Their handles go into a queue that the job manager drains
once every task of the stage has been submitted.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, List, Tuple

from ..errors import ImportJobError, StageStateError, TaskJoinError

logger = logging.getLogger(__name__)


@dataclass
class TaskHandle:
    """An in-flight stage operation for one episode."""

    episode_id: int
    task: asyncio.Task

    async def result(self) -> Any:
        """Wait for the operation and return its value.

        Raises:
            ImportJobError: The operation's own failure, tagged with the episode id.
            TaskJoinError: If the operation failed with any other exception.
        """
        try:
            return await self.task
        except ImportJobError as e:
            if e.episode_id is None:
                e.episode_id = self.episode_id
            raise
        except Exception as e:
            raise TaskJoinError(
                f"Task {self.task.get_name()} failed unexpectedly: {type(e).__name__}: {e}",
                self.episode_id,
            ) from e


def _discard_outcome(task: asyncio.Task) -> None:
    # Retrieve the exception so asyncio does not report it as never retrieved
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug(f"Discarded result of abandoned task {task.get_name()}: {error}")


class StageExecutor:
    """Caps how many operations of one stage run at the same time.

    Attributes:
        name: Stage name, used for task names and logs.
        max_concurrent: Number of permits.
        active: Operations currently holding a permit.
        peak_active: Highest value `active` has reached.
    """

    def __init__(self, name: str, max_concurrent: int):
        if max_concurrent <= 0:
            raise ValueError(
                f"max_concurrent must be greater than zero, got {max_concurrent}"
            )
        self.name = name
        self.max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._handles: "asyncio.Queue[TaskHandle]" = asyncio.Queue()
        self._draining = False
        self._abandoned: List[asyncio.Task] = []
        self.active = 0
        self.peak_active = 0
        self.submitted = 0

    @property
    def pending(self) -> int:
        """Number of handles waiting to be drained."""
        return self._handles.qsize()

    @property
    def abandoned(self) -> List[asyncio.Task]:
        return list(self._abandoned)

    def submit(
        self,
        episode_id: int,
        operation: Callable[..., Awaitable[Any]],
        *args: Any,
    ) -> asyncio.Task:
        """Spawn `operation(*args)` as a task bounded by this stage's permits.

        Must be called from inside a running event loop.

        Raises:
            StageStateError: If the stage is already being drained.
        """
        if self._draining:
            raise StageStateError(
                f"Cannot submit to stage '{self.name}' after draining has started",
                episode_id,
            )

        task = asyncio.create_task(
            self._run(operation, *args), name=f"{self.name}-{episode_id}"
        )
        self._handles.put_nowait(TaskHandle(episode_id=episode_id, task=task))
        self.submitted += 1
        return task

    async def _run(self, operation: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        async with self._semaphore:
            self.active += 1
            self.peak_active = max(self.peak_active, self.active)
            try:
                return await operation(*args)
            finally:
                self.active -= 1

    async def drain(self) -> AsyncIterator[Tuple[int, Any]]:
        """Await every submitted operation in submission order.

        Yields:
            (episode_id, result) for each successful operation.

        Raises:
            StageStateError: If the stage was already drained.
            ImportJobError: The first failure. Handles not yet awaited are
                abandoned: they keep running and their outcome is discarded.
        """
        if self._draining:
            raise StageStateError(f"Stage '{self.name}' has already been drained")
        self._draining = True

        while not self._handles.empty():
            handle = self._handles.get_nowait()
            try:
                result = await handle.result()
            except BaseException:
                self._abandon_remaining()
                raise
            yield handle.episode_id, result

    def _abandon_remaining(self) -> None:
        while not self._handles.empty():
            handle = self._handles.get_nowait()
            handle.task.add_done_callback(_discard_outcome)
            self._abandoned.append(handle.task)
        if self._abandoned:
            logger.warning(
                f"[{self.name}] Abandoning {len(self._abandoned)} in-flight operations"
            )
