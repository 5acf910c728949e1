"""Tests for trace-derived metrics and trace rendering."""

import logging

import pytest

from kernel_sim.main import run
from kernel_sim.metrics.performance import compute_metrics, ready_waits
from kernel_sim.simulator.trace import (
    ConsoleTraceSink,
    ListTraceSink,
    LoggingTraceSink,
    TeeTraceSink,
    TraceEvent,
    TraceKind,
    format_event,
)
from kernel_sim.workload.generator import boot, demo_workload


@pytest.fixture
def demo_events(make_kernel, program, sink):
    kernel = make_kernel(time_slice=3)
    boot(kernel, program, demo_workload())
    run(kernel)
    return sink.events


class TestComputeMetrics:
    def test_empty_trace(self) -> None:
        metrics = compute_metrics([])
        assert metrics["total_ticks"] == 0
        assert metrics["cpu_utilization"] == 0.0
        assert metrics["dispatches"] == 0

    def test_demo_counts(self, demo_events) -> None:
        metrics = compute_metrics(demo_events)
        assert metrics["total_ticks"] == 27
        assert metrics["busy_ticks"] == 26
        assert metrics["dispatches"] == 11
        assert metrics["preemptions"] == 8
        assert metrics["yields"] == 1
        assert metrics["prints"] == 2
        assert metrics["exits"] == 2
        assert metrics["blocks"] == 1
        assert metrics["idle_schedules"] == 1
        assert metrics["cpu_utilization"] == pytest.approx(100.0 * 26 / 27)

    def test_demo_ready_waits(self, demo_events) -> None:
        waits = ready_waits(demo_events)
        assert waits == [0, 3, 5, 3, 4, 6, 6, 6, 6, 3, 3]
        metrics = compute_metrics(demo_events)
        assert metrics["avg_ready_wait"] == pytest.approx(45 / 11)
        assert metrics["p99_ready_wait"] == pytest.approx(6.0)


class TestTraceSinks:
    def test_format_matches_console_lines(self) -> None:
        assert format_event(TraceEvent(4, TraceKind.TICK)) == "\n--- TICK 4 ---"
        assert (
            format_event(TraceEvent(3, TraceKind.REQUEUE, task_id=1))
            == "[SCHEDULER] Time slice ended for 1. Re-queuing."
        )
        assert (
            format_event(TraceEvent(5, TraceKind.PRINT, task_id=2, message="hi"))
            == "[KERNEL/OUT] Task 2 says: hi"
        )
        assert (
            format_event(TraceEvent(2, TraceKind.RUN, task_id=1, program_counter=2))
            == "[CPU] Running: 1. PC: 2"
        )
        assert format_event(TraceEvent(9, TraceKind.SHUTDOWN)).startswith("[KERNEL] All tasks")

    def test_console_sink_prints(self, capsys) -> None:
        ConsoleTraceSink().record(TraceEvent(0, TraceKind.IDLE))
        assert capsys.readouterr().out == "[SCHEDULER] Ready queue empty. Idling.\n"

    def test_logging_sink_levels(self, caplog) -> None:
        sink = LoggingTraceSink()
        with caplog.at_level(logging.DEBUG, logger="kernel_sim.simulator.trace"):
            sink.record(TraceEvent(1, TraceKind.TICK))
            sink.record(TraceEvent(1, TraceKind.EXIT, task_id=3))
        levels = [(r.levelno, r.getMessage()) for r in caplog.records]
        assert levels[0][0] == logging.DEBUG
        assert levels[1][0] == logging.INFO
        assert "exit task=3" in levels[1][1]

    def test_tee_fans_out(self) -> None:
        a, b = ListTraceSink(), ListTraceSink()
        event = TraceEvent(0, TraceKind.IDLE)
        TeeTraceSink(a, b).record(event)
        assert a.events == b.events == [event]
