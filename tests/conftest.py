"""Shared fixtures for the kernel simulator tests."""

from __future__ import annotations

from typing import Callable, Iterable

import pytest

from kernel_sim.simulator.kernel import Kernel
from kernel_sim.simulator.task import Task, TaskState
from kernel_sim.simulator.trace import ListTraceSink
from kernel_sim.workload.scripts import ScriptedProgram


@pytest.fixture
def sink() -> ListTraceSink:
    return ListTraceSink()


@pytest.fixture
def program() -> ScriptedProgram:
    return ScriptedProgram()


@pytest.fixture
def make_kernel(sink: ListTraceSink, program: ScriptedProgram) -> Callable[..., Kernel]:
    """Factory for kernels wired to the shared sink and program."""

    def _make(time_slice: int = 3) -> Kernel:
        return Kernel(program=program, sink=sink, time_slice=time_slice)

    return _make


def assert_invariants(kernel: Kernel, retired: Iterable[Task] = ()) -> None:
    """Check the slot/queue invariants that must hold between operations."""
    live_ids = [t.task_id for t in kernel.live_tasks()]
    assert len(live_ids) == len(set(live_ids)), f"duplicate ids in {live_ids}"

    if kernel.current is not None:
        assert kernel.current.state is TaskState.RUNNING
        assert kernel.current.task_id not in kernel.ready_queue
    for task in kernel.ready_queue:
        assert task.state is TaskState.READY

    for task in retired:
        assert task.state in (TaskState.EXITED, TaskState.BLOCKED)
        assert task.task_id not in live_ids
