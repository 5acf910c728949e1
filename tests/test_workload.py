"""Tests for scripted programs and workload construction."""

import json

import pytest

from kernel_sim.simulator.calls import BLOCK, EXIT, YIELD, CallKind, print_call
from kernel_sim.simulator.errors import WorkloadError
from kernel_sim.workload.generator import (
    TaskSpec,
    Workload,
    boot,
    demo_workload,
    generate_workload,
    load_workload,
)
from kernel_sim.workload.scripts import ScriptedProgram


class TestScriptedProgram:
    def test_returns_call_at_matching_pc(self) -> None:
        program = ScriptedProgram({1: {3: YIELD, 10: EXIT}})
        assert program(1, 3) == YIELD
        assert program(1, 10) == EXIT

    def test_unknown_task_or_pc_returns_none(self) -> None:
        program = ScriptedProgram({1: {3: YIELD}})
        assert program(1, 4) is None
        assert program(2, 3) is None

    def test_register_replaces_script(self) -> None:
        program = ScriptedProgram()
        program.register(1, {2: BLOCK})
        program.register(1, {5: EXIT})
        assert 1 in program
        assert program(1, 2) is None
        assert program(1, 5) == EXIT

    def test_non_positive_pc_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-positive program counter"):
            ScriptedProgram({1: {0: EXIT}})


class TestDemoWorkload:
    def test_matches_classic_configuration(self) -> None:
        workload = demo_workload()
        assert [(s.name, s.priority) for s in workload.specs] == [
            ("Init_Task", 10),
            ("WebApp_Worker", 5),
            ("File_IO_Task", 8),
        ]
        init, web, file_io = workload.specs
        assert init.script == {5: print_call("Task 1 is halfway!"), 10: EXIT}
        assert web.script[3] == YIELD
        assert web.script[12] == EXIT
        assert file_io.script == {4: BLOCK}

    def test_boot_registers_scripts_under_assigned_ids(self, make_kernel, program) -> None:
        kernel = make_kernel()
        kernel.spawn("already-there")
        tasks = boot(kernel, program, Workload([TaskSpec("late", 1, {2: EXIT})]))
        (task,) = tasks
        assert task.task_id == 2
        assert program(2, 2) == EXIT
        assert 1 not in program


class TestGenerateWorkload:
    def test_is_reproducible(self) -> None:
        a = generate_workload(num_tasks=6, seed=3)
        b = generate_workload(num_tasks=6, seed=3)
        assert a == b

    def test_every_script_terminates(self) -> None:
        workload = generate_workload(num_tasks=20, seed=11, lifetime_range=(4, 9))
        assert len(workload) == 20
        for spec in workload.specs:
            last_pc = max(spec.script)
            assert 4 <= last_pc <= 9
            assert spec.script[last_pc].kind in (CallKind.EXIT, CallKind.BLOCK)
            assert all(
                call.kind in (CallKind.YIELD, CallKind.PRINT)
                for pc, call in spec.script.items()
                if pc != last_pc
            )

    def test_rejects_empty_workload(self) -> None:
        with pytest.raises(ValueError, match="num_tasks must be positive"):
            generate_workload(num_tasks=0)


class TestLoadWorkload:
    def test_loads_json_file(self, tmp_path) -> None:
        path = tmp_path / "tasks.json"
        path.write_text(
            json.dumps(
                {
                    "tasks": [
                        {
                            "name": "worker",
                            "priority": 3,
                            "script": {
                                "2": {"call": "print", "message": "hi"},
                                "4": {"call": "YIELD"},
                                "6": {"call": "exit"},
                            },
                        },
                        {"name": "sleeper", "script": {"1": {"call": "block"}}},
                    ]
                }
            )
        )
        workload = load_workload(path)
        worker, sleeper = workload.specs
        assert worker == TaskSpec("worker", 3, {2: print_call("hi"), 4: YIELD, 6: EXIT})
        assert sleeper.priority == 0
        assert sleeper.script == {1: BLOCK}

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(WorkloadError, match="missing.json"):
            load_workload(tmp_path / "missing.json")

    def test_non_utf8_file(self, tmp_path) -> None:
        path = tmp_path / "binary.json"
        path.write_bytes(b'{"tasks": [{"name": "\xff"}]}')
        with pytest.raises(WorkloadError, match="not valid UTF-8"):
            load_workload(path)

    def test_invalid_json(self, tmp_path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(WorkloadError, match="invalid JSON"):
            load_workload(path)

    @pytest.mark.parametrize(
        ("payload", "match"),
        [
            ({}, "top-level 'tasks' list"),
            ({"tasks": [{"priority": 1}]}, "'name' must be a non-empty string"),
            ({"tasks": [{"name": "a", "priority": "high"}]}, "'priority' must be an integer"),
            ({"tasks": [{"name": "a", "script": {"x": {"call": "exit"}}}]}, "not an integer"),
            ({"tasks": [{"name": "a", "script": {"0": {"call": "exit"}}}]}, "must be positive"),
            ({"tasks": [{"name": "a", "script": {"1": {"call": "fork"}}}]}, "unknown call"),
            ({"tasks": [{"name": "a", "script": {"1": {"call": "print"}}}]}, "requires a string"),
            ({"tasks": [{"name": "a", "script": {"1": "exit"}}]}, "'call' key"),
            ({"tasks": [{"name": "a", "script": [1, 2]}]}, "'script' must be an object"),
            ({"tasks": [{"name": "a", "script": "exit"}]}, "'script' must be an object"),
        ],
    )
    def test_malformed_workloads(self, tmp_path, payload, match) -> None:
        path = tmp_path / "w.json"
        path.write_text(json.dumps(payload))
        with pytest.raises(WorkloadError, match=match):
            load_workload(path)
