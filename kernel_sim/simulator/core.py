"""CPU core model: the single current-task slot."""

from __future__ import annotations

from typing import Optional

from kernel_sim.simulator.errors import TaskStateError
from kernel_sim.simulator.task import Task


class Core:
    """A CPU core that holds at most one task.

    The core does not change task state; the scheduler and dispatcher
    do that before assigning or after releasing a task.

    Args:
        core_id: Identifier for this core.
    """

    __slots__ = ("core_id", "current_task")

    def __init__(self, core_id: int = 0) -> None:
        self.core_id: int = core_id
        self.current_task: Optional[Task] = None

    def assign_task(self, task: Task) -> None:
        """Place *task* on this core.

        Raises:
            TaskStateError: If the core already has an assigned task.
        """
        if self.current_task is not None:
            raise TaskStateError(
                f"Core {self.core_id} is busy with Task {self.current_task.task_id}; "
                f"cannot assign Task {task.task_id}."
            )
        self.current_task = task

    def release(self) -> Optional[Task]:
        """Remove and return the current task.

        Returns:
            The released Task, or None if the core was idle.
        """
        task = self.current_task
        self.current_task = None
        return task

    def is_idle(self) -> bool:
        """Return True if no task is currently assigned."""
        return self.current_task is None

    def __repr__(self) -> str:
        task_info = self.current_task.task_id if self.current_task else "idle"
        return f"Core(id={self.core_id}, task={task_info})"
