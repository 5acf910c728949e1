"""Performance metrics computed from a recorded trace."""

from __future__ import annotations

from typing import Dict, Iterable, List

import numpy as np

from kernel_sim.simulator.trace import TraceEvent, TraceKind

_COUNTED = {
    "dispatches": TraceKind.DISPATCH,
    "preemptions": TraceKind.REQUEUE,
    "yields": TraceKind.YIELD,
    "prints": TraceKind.PRINT,
    "exits": TraceKind.EXIT,
    "blocks": TraceKind.BLOCK,
    "idle_schedules": TraceKind.IDLE,
}


def ready_waits(events: Iterable[TraceEvent]) -> List[int]:
    """Ticks each dispatch spent waiting since the task was last enqueued."""
    enqueued_at: Dict[int, int] = {}
    waits: List[int] = []
    for e in events:
        if e.task_id is None:
            continue
        if e.kind in (TraceKind.SPAWN, TraceKind.REQUEUE):
            enqueued_at[e.task_id] = e.tick
        elif e.kind is TraceKind.DISPATCH and e.task_id in enqueued_at:
            waits.append(e.tick - enqueued_at.pop(e.task_id))
    return waits


def compute_metrics(events: Iterable[TraceEvent]) -> Dict[str, float]:
    events = list(events)
    metrics: Dict[str, float] = {name: 0 for name in _COUNTED}
    if not events:
        metrics.update(
            {
                "total_ticks": 0,
                "busy_ticks": 0,
                "cpu_utilization": 0.0,
                "avg_ready_wait": 0.0,
                "p99_ready_wait": 0.0,
            }
        )
        return metrics

    kinds = np.array([e.kind.value for e in events])
    for name, kind in _COUNTED.items():
        metrics[name] = int(np.count_nonzero(kinds == kind.value))

    total_ticks = max(e.tick for e in events)
    busy_ticks = int(np.count_nonzero(kinds == TraceKind.RUN.value))
    waits = ready_waits(events)

    metrics["total_ticks"] = total_ticks
    metrics["busy_ticks"] = busy_ticks
    metrics["cpu_utilization"] = (100.0 * busy_ticks / total_ticks) if total_ticks else 0.0
    metrics["avg_ready_wait"] = float(np.mean(waits)) if waits else 0.0
    metrics["p99_ready_wait"] = float(np.percentile(waits, 99)) if waits else 0.0
    return metrics
