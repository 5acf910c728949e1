"""FIFO ready queue."""

from __future__ import annotations

from collections import deque
from typing import Iterator, List, Optional, Set

from kernel_sim.simulator.errors import TaskStateError
from kernel_sim.simulator.task import Task, TaskState


class ReadyQueue:
    """Tasks waiting for the CPU, dispatched strictly in arrival order.

    A task id may appear at most once.  Only ``READY`` tasks are
    accepted.
    """

    def __init__(self) -> None:
        self._queue: deque[Task] = deque()
        self._ids: Set[int] = set()

    def append(self, task: Task) -> None:
        """Add *task* at the tail of the queue."""
        if task.state is not TaskState.READY:
            raise TaskStateError(
                f"Cannot enqueue Task {task.task_id} in state {task.state.value}"
            )
        if task.task_id in self._ids:
            raise TaskStateError(f"Task {task.task_id} is already queued")
        self._queue.append(task)
        self._ids.add(task.task_id)

    def pop(self) -> Optional[Task]:
        """Remove and return the head, or None when empty."""
        if not self._queue:
            return None
        task = self._queue.popleft()
        self._ids.discard(task.task_id)
        return task

    def peek(self) -> Optional[Task]:
        return self._queue[0] if self._queue else None

    def ids(self) -> List[int]:
        return [t.task_id for t in self._queue]

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._ids

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._queue))

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)

    def __repr__(self) -> str:
        return f"ReadyQueue({self.ids()})"
