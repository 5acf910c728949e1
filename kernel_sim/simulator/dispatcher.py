"""Kernel call dispatch."""

from __future__ import annotations

from typing import Callable

from kernel_sim.simulator.calls import CallKind, KernelCall
from kernel_sim.simulator.scheduler import Scheduler
from kernel_sim.simulator.task import Task, TaskState
from kernel_sim.simulator.trace import TraceEvent, TraceKind, TraceSink


class KernelCallDispatcher:
    """Applies a kernel call to the task on the core.

    With an idle core, ``EXIT``, ``PRINT`` and ``BLOCK`` do nothing and
    ``YIELD`` runs an idle schedule.

    Args:
        scheduler: Scheduler owning the core and ready queue.
        sink: Receives yield, print, exit and block events.
        clock: Returns the current tick, used to stamp events.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        sink: TraceSink,
        clock: Callable[[], int],
    ) -> None:
        self._scheduler = scheduler
        self._sink = sink
        self._clock = clock

    def handle(self, call: KernelCall) -> None:
        """Apply *call* to the task currently on the core."""
        kind = call.kind
        if kind is CallKind.YIELD:
            self._handle_yield()
        elif kind is CallKind.EXIT:
            self._handle_exit()
        elif kind is CallKind.PRINT:
            self._handle_print(call.message or "")
        elif kind is CallKind.BLOCK:
            self._handle_block()
        else:
            raise ValueError(f"Unknown kernel call: {call!r}")

    def _handle_yield(self) -> None:
        self._emit(TraceKind.YIELD, self._scheduler.current)
        self._scheduler.schedule()

    def _handle_exit(self) -> None:
        task = self._scheduler.detach_current()
        if task is None:
            return
        task.state = TaskState.EXITED
        self._emit(TraceKind.EXIT, task)

    def _handle_print(self, message: str) -> None:
        task = self._scheduler.current
        if task is None:
            return
        self._emit(TraceKind.PRINT, task, message)

    def _handle_block(self) -> None:
        task = self._scheduler.detach_current()
        if task is None:
            return
        task.state = TaskState.BLOCKED
        self._emit(TraceKind.BLOCK, task)
        # Block does not wait for the next time slice.
        self._scheduler.schedule()

    def _emit(self, kind: TraceKind, task: Task | None, message: str = "") -> None:
        self._sink.record(
            TraceEvent(
                tick=self._clock(),
                kind=kind,
                task_id=task.task_id if task else None,
                program_counter=task.program_counter if task else None,
                message=message,
            )
        )
