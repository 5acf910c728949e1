"""Round Robin scheduler: decides which task occupies the core."""

from __future__ import annotations

from typing import Callable, Optional

from kernel_sim.simulator.core import Core
from kernel_sim.simulator.ready_queue import ReadyQueue
from kernel_sim.simulator.task import Task, TaskState
from kernel_sim.simulator.trace import TraceEvent, TraceKind, TraceSink


class Scheduler:
    """Strict FIFO Round Robin over a single core.

    The scheduler owns the ready queue and the core.  It never fails:
    with nothing to run it simply leaves the core idle.  Task priority
    is ignored.

    Args:
        sink: Receives requeue, dispatch and idle events.
        clock: Returns the current tick, used to stamp events.
    """

    def __init__(self, sink: TraceSink, clock: Callable[[], int]) -> None:
        self.ready_queue: ReadyQueue = ReadyQueue()
        self.core: Core = Core()
        self._sink = sink
        self._clock = clock

    @property
    def current(self) -> Optional[Task]:
        return self.core.current_task

    def add_task(self, task: Task) -> None:
        self.ready_queue.append(task)

    def detach_current(self) -> Optional[Task]:
        """Take the current task off the core without requeueing it."""
        return self.core.release()

    def has_pending_tasks(self) -> bool:
        return len(self.ready_queue) > 0

    def schedule(self) -> Optional[Task]:
        """Requeue the running task and dispatch the head of the queue.

        A task on the core that is no longer ``RUNNING`` has already
        been detached by a kernel call and is dropped, not requeued.

        Returns:
            The task now on the core, or None if the core is idle.
        """
        previous = self.core.release()
        if previous is not None and previous.state is TaskState.RUNNING:
            previous.state = TaskState.READY
            self._emit(TraceKind.REQUEUE, previous)
            self.ready_queue.append(previous)

        next_task = self.ready_queue.pop()
        if next_task is None:
            self._emit(TraceKind.IDLE)
            return None

        next_task.state = TaskState.RUNNING
        self.core.assign_task(next_task)
        self._emit(TraceKind.DISPATCH, next_task, str(next_task))
        return next_task

    def _emit(self, kind: TraceKind, task: Task | None = None, message: str = "") -> None:
        self._sink.record(
            TraceEvent(
                tick=self._clock(),
                kind=kind,
                task_id=task.task_id if task else None,
                program_counter=task.program_counter if task else None,
                message=message,
            )
        )
