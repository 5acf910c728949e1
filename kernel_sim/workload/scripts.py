"""Scripted task programs."""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from kernel_sim.simulator.calls import KernelCall

Script = Mapping[int, KernelCall]


class ScriptedProgram:
    """Task program backed by a per-task script table.

    Each script maps a program counter to the kernel call the task
    issues when its counter reaches that value.  Tasks without a script
    and counters without an entry issue no call.
    """

    def __init__(self, scripts: Mapping[int, Script] | None = None) -> None:
        self._scripts: Dict[int, Dict[int, KernelCall]] = {}
        for task_id, script in (scripts or {}).items():
            self.register(task_id, script)

    def register(self, task_id: int, script: Script) -> None:
        for pc in script:
            if pc <= 0:
                raise ValueError(
                    f"script for Task {task_id} has non-positive program counter {pc}"
                )
        self._scripts[task_id] = dict(script)

    def __call__(self, task_id: int, program_counter: int) -> Optional[KernelCall]:
        return self._scripts.get(task_id, {}).get(program_counter)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._scripts

    def __repr__(self) -> str:
        return f"ScriptedProgram(tasks={sorted(self._scripts)})"
