"""Task model for the round-robin kernel simulator."""

from __future__ import annotations

from enum import Enum


class TaskState(Enum):
    """Lifecycle state of a task."""

    READY = "Ready"
    RUNNING = "Running"
    BLOCKED = "Blocked"
    EXITED = "Exited"


class Task:
    """A schedulable unit of work.

    Tasks are created by ``Kernel.spawn`` only, which owns id assignment.
    ``BLOCKED`` and ``EXITED`` are terminal: once a task reaches either
    state it leaves the kernel's bookkeeping for good.

    The priority is carried for forward compatibility; the round-robin
    policy never reads it.
    """

    __slots__ = (
        "_task_id",
        "_name",
        "state",
        "program_counter",
        "priority",
    )

    def __init__(self, task_id: int, name: str, priority: int = 0) -> None:
        if task_id <= 0:
            raise ValueError(f"task_id must be positive, got {task_id}")

        self._task_id: int = task_id
        self._name: str = name
        self.state: TaskState = TaskState.READY
        self.program_counter: int = 0
        self.priority: int = priority

    @property
    def task_id(self) -> int:
        return self._task_id

    @property
    def name(self) -> str:
        return self._name

    def advance(self) -> int:
        """Execute one instruction and return the new program counter."""
        self.program_counter += 1
        return self.program_counter

    def is_terminal(self) -> bool:
        """Return True if the task can never run again."""
        return self.state in (TaskState.BLOCKED, TaskState.EXITED)

    def __repr__(self) -> str:
        return (
            f"Task(id={self._task_id}, name={self._name!r}, "
            f"state={self.state.name}, pc={self.program_counter}, "
            f"priority={self.priority})"
        )

    def __str__(self) -> str:
        return (
            f"[Task {self._task_id}] ({self._name}): "
            f"State={self.state.value}, PC={self.program_counter}"
        )
