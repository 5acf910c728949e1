"""Workload construction for the kernel simulator."""

from __future__ import annotations

import json
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from kernel_sim.simulator.calls import BLOCK, EXIT, YIELD, CallKind, KernelCall, print_call
from kernel_sim.simulator.errors import WorkloadError
from kernel_sim.simulator.kernel import Kernel
from kernel_sim.simulator.task import Task
from kernel_sim.workload.scripts import ScriptedProgram


@dataclass(frozen=True)
class TaskSpec:
    """A task to spawn and the script it runs."""

    name: str
    priority: int = 0
    script: Dict[int, KernelCall] = field(default_factory=dict)


@dataclass(frozen=True)
class Workload:
    specs: List[TaskSpec]

    def __len__(self) -> int:
        return len(self.specs)


def demo_workload() -> Workload:
    """The classic three-task configuration.

    Task 1 prints at pc 5 and exits at 10; task 2 yields at 3, prints at
    8 and exits at 12; task 3 blocks at 4.
    """
    return Workload(
        [
            TaskSpec(
                "Init_Task",
                10,
                {5: print_call("Task 1 is halfway!"), 10: EXIT},
            ),
            TaskSpec(
                "WebApp_Worker",
                5,
                {3: YIELD, 8: print_call("Task 2 is doing work."), 12: EXIT},
            ),
            TaskSpec("File_IO_Task", 8, {4: BLOCK}),
        ]
    )


def generate_workload(
    num_tasks: int,
    seed: int = 42,
    lifetime_range: tuple[int, int] = (4, 15),
    priority_range: tuple[int, int] = (1, 10),
    block_fraction: float = 0.25,
) -> Workload:
    """Generate a reproducible workload with random scripts.

    Uses a local Random instance seeded with *seed* so that results are
    fully deterministic regardless of external random state.  Every
    script ends in an exit or a block, so the run always drains.

    Args:
        num_tasks: Number of tasks to generate.
        seed: RNG seed for reproducibility.
        lifetime_range: Inclusive (min, max) program counter at which the
            task exits or blocks.
        priority_range: Inclusive (min, max) range for the recorded priority.
        block_fraction: Probability that a task ends by blocking.

    Returns:
        A Workload with tasks named ``task-0`` … ``task-<n-1>``.
    """
    if num_tasks <= 0:
        raise ValueError(f"num_tasks must be positive, got {num_tasks}")
    low, high = lifetime_range
    if low < 2 or high < low:
        raise ValueError(f"invalid lifetime_range {lifetime_range}")

    rng = random.Random(seed)
    specs: List[TaskSpec] = []

    for i in range(num_tasks):
        lifetime = rng.randint(low, high)
        script: Dict[int, KernelCall] = {}
        for pc in range(1, lifetime):
            roll = rng.random()
            if roll < 0.15:
                script[pc] = YIELD
            elif roll < 0.25:
                script[pc] = print_call(f"task-{i} reached pc {pc}")
        script[lifetime] = BLOCK if rng.random() < block_fraction else EXIT
        specs.append(
            TaskSpec(name=f"task-{i}", priority=rng.randint(*priority_range), script=script)
        )

    return Workload(specs)


_CALLS_BY_NAME = {
    "yield": CallKind.YIELD,
    "print": CallKind.PRINT,
    "exit": CallKind.EXIT,
    "block": CallKind.BLOCK,
}


def _parse_call(raw: Any, where: str) -> KernelCall:
    if not isinstance(raw, dict) or "call" not in raw:
        raise WorkloadError(f"{where}: expected an object with a 'call' key")
    kind = _CALLS_BY_NAME.get(str(raw["call"]).lower())
    if kind is None:
        raise WorkloadError(f"{where}: unknown call {raw['call']!r}")
    if kind is CallKind.PRINT:
        message = raw.get("message")
        if not isinstance(message, str):
            raise WorkloadError(f"{where}: print requires a string 'message'")
        return print_call(message)
    return KernelCall(kind)


def _parse_spec(raw: Any, where: str) -> TaskSpec:
    if not isinstance(raw, dict):
        raise WorkloadError(f"{where}: expected an object")
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise WorkloadError(f"{where}: 'name' must be a non-empty string")
    priority = raw.get("priority", 0)
    if not isinstance(priority, int) or isinstance(priority, bool):
        raise WorkloadError(f"{where}: 'priority' must be an integer")

    raw_script = raw.get("script") or {}
    if not isinstance(raw_script, dict):
        raise WorkloadError(f"{where}: 'script' must be an object")

    script: Dict[int, KernelCall] = {}
    for key, value in raw_script.items():
        try:
            pc = int(key)
        except ValueError:
            raise WorkloadError(f"{where}: program counter {key!r} is not an integer") from None
        if pc <= 0:
            raise WorkloadError(f"{where}: program counter {pc} must be positive")
        script[pc] = _parse_call(value, f"{where}.script[{pc}]")
    return TaskSpec(name=name, priority=priority, script=script)


def load_workload(path: str | Path) -> Workload:
    """Read a workload from a JSON file.

    The file holds ``{"tasks": [{"name": ..., "priority": ..., "script":
    {"<pc>": {"call": "yield" | "print" | "exit" | "block", "message":
    ...}}}]}``.

    Raises:
        WorkloadError: If the file cannot be read or is malformed.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise WorkloadError(f"{path}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise WorkloadError(f"{path}: not valid UTF-8 ({e.reason})") from e
    except json.JSONDecodeError as e:
        raise WorkloadError(f"{path}: invalid JSON ({e.msg} at line {e.lineno})") from e

    tasks = data.get("tasks") if isinstance(data, dict) else None
    if not isinstance(tasks, list):
        raise WorkloadError(f"{path}: expected a top-level 'tasks' list")
    return Workload([_parse_spec(raw, f"{path}:tasks[{i}]") for i, raw in enumerate(tasks)])


def boot(kernel: Kernel, program: ScriptedProgram, workload: Workload) -> List[Task]:
    """Spawn every task in *workload* and register its script.

    Scripts are registered under the id the kernel assigns, so the
    workload never needs to know ids in advance.

    Returns:
        The spawned tasks, in spawn order.
    """
    tasks: List[Task] = []
    for spec in workload.specs:
        task = kernel.spawn(spec.name, spec.priority)
        program.register(task.task_id, spec.script)
        tasks.append(task)
    return tasks
