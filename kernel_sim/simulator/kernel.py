"""Tick-driven kernel.

This module holds no scheduling policy.  It owns the clock and the id
counter, advances the running task, asks the task program for a kernel
call and hands the call to the dispatcher.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Callable, List, Optional

from kernel_sim.simulator.calls import KernelCall
from kernel_sim.simulator.dispatcher import KernelCallDispatcher
from kernel_sim.simulator.ready_queue import ReadyQueue
from kernel_sim.simulator.scheduler import Scheduler
from kernel_sim.simulator.task import Task
from kernel_sim.simulator.trace import NullTraceSink, TraceEvent, TraceKind, TraceSink

DEFAULT_TIME_SLICE = 3

TaskProgram = Callable[[int, int], Optional[KernelCall]]


class TickOutcome(Enum):
    """Result of a single call to ``Kernel.tick``."""

    CONTINUE = auto()
    NO_MORE_WORK = auto()


class Kernel:
    """Deterministic, single-core, tick-driven kernel.

    Each tick the kernel:
      1. Advances the tick counter.
      2. Preempts on every *time_slice*-th tick by calling ``schedule()``.
      3. Runs the task on the core for one instruction and dispatches
         the kernel call its program returns, if any.
      4. If the core was idle instead, stops when the ready queue is
         empty or schedules to fill the core.

    The kernel is not thread-safe; a single driver calls ``tick()``
    repeatedly.

    Args:
        program: Task program mapping ``(task_id, program_counter)`` to
            an optional kernel call.
        sink: Trace sink for every scheduling decision.
        time_slice: Preemption period in ticks.
    """

    def __init__(
        self,
        program: TaskProgram,
        sink: TraceSink | None = None,
        time_slice: int = DEFAULT_TIME_SLICE,
    ) -> None:
        if time_slice <= 0:
            raise ValueError(f"time_slice must be positive, got {time_slice}")

        self.time_slice: int = time_slice
        self.ticks: int = 0
        self._next_pid: int = 1
        self._program: TaskProgram = program
        self._sink: TraceSink = sink if sink is not None else NullTraceSink()
        self._scheduler = Scheduler(self._sink, self._clock)
        self._dispatcher = KernelCallDispatcher(self._scheduler, self._sink, self._clock)

    @property
    def current(self) -> Optional[Task]:
        """Task on the core, if any."""
        return self._scheduler.current

    @property
    def ready_queue(self) -> ReadyQueue:
        """The scheduler's own queue; inspect it, but change it only through the kernel."""
        return self._scheduler.ready_queue

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def dispatcher(self) -> KernelCallDispatcher:
        return self._dispatcher

    def live_tasks(self) -> List[Task]:
        """Current task followed by the ready queue, in dispatch order."""
        tasks = [self.current] if self.current is not None else []
        tasks.extend(self.ready_queue)
        return tasks

    def spawn(self, name: str, priority: int = 0) -> Task:
        """Create a task with the next id and append it to the ready queue."""
        task = Task(self._next_pid, name, priority)
        self._next_pid += 1
        self._emit(TraceKind.SPAWN, task, str(task))
        self._scheduler.add_task(task)
        return task

    def schedule(self) -> Optional[Task]:
        """Requeue the running task and dispatch the next ready one."""
        return self._scheduler.schedule()

    def handle_kernel_call(self, call: KernelCall) -> None:
        """Apply *call* to the task on the core."""
        self._dispatcher.handle(call)

    def tick(self) -> TickOutcome:
        """Advance simulated time by one tick."""
        self.ticks += 1
        self._emit(TraceKind.TICK)

        if self.ticks % self.time_slice == 0:
            self._scheduler.schedule()

        task = self._scheduler.current
        if task is not None:
            pc = task.advance()
            self._emit(TraceKind.RUN, task)
            call = self._program(task.task_id, pc)
            if call is not None:
                self._dispatcher.handle(call)
        else:
            if not self._scheduler.has_pending_tasks():
                self._emit(TraceKind.SHUTDOWN)
                return TickOutcome.NO_MORE_WORK
            self._scheduler.schedule()

        return TickOutcome.CONTINUE

    def _clock(self) -> int:
        return self.ticks

    def _emit(self, kind: TraceKind, task: Task | None = None, message: str = "") -> None:
        self._sink.record(
            TraceEvent(
                tick=self.ticks,
                kind=kind,
                task_id=task.task_id if task else None,
                program_counter=task.program_counter if task else None,
                message=message,
            )
        )

    def __repr__(self) -> str:
        return (
            f"Kernel(ticks={self.ticks}, current={self.current!r}, "
            f"ready={self.ready_queue.ids()})"
        )
