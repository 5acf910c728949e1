"""Trace events and sinks.

The scheduler, dispatcher and kernel report every decision as a
``TraceEvent`` to an injected sink.  Rendering is the sink's business,
so the core can be tested by inspecting recorded events instead of
captured console text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)


class TraceKind(Enum):
    """What happened."""

    SPAWN = "spawn"
    TICK = "tick"
    RUN = "run"
    DISPATCH = "dispatch"
    REQUEUE = "requeue"
    IDLE = "idle"
    YIELD = "yield"
    PRINT = "print"
    EXIT = "exit"
    BLOCK = "block"
    SHUTDOWN = "shutdown"


# Per-tick noise; logged below INFO.
_CHATTY_KINDS = frozenset({TraceKind.TICK, TraceKind.RUN})


@dataclass(frozen=True)
class TraceEvent:
    """A single scheduling decision.

    Attributes:
        tick: Kernel tick counter when the event was emitted.
        kind: Event category.
        task_id: Task the event concerns, if any.
        program_counter: Task program counter at the time of the event.
        message: Free text (task rendering for spawn/dispatch, payload
            for print).
    """

    tick: int
    kind: TraceKind
    task_id: Optional[int] = None
    program_counter: Optional[int] = None
    message: str = ""


class TraceSink(Protocol):
    """Anything that can receive trace events."""

    def record(self, event: TraceEvent) -> None:
        ...


def format_event(event: TraceEvent) -> str:
    """Render *event* as a console line."""
    kind = event.kind
    if kind is TraceKind.TICK:
        return f"\n--- TICK {event.tick} ---"
    if kind is TraceKind.SPAWN:
        return f"[KERNEL] Spawning: {event.message}"
    if kind is TraceKind.RUN:
        return f"[CPU] Running: {event.task_id}. PC: {event.program_counter}"
    if kind is TraceKind.DISPATCH:
        return f"[SCHEDULER] Dispatching: {event.message}"
    if kind is TraceKind.REQUEUE:
        return f"[SCHEDULER] Time slice ended for {event.task_id}. Re-queuing."
    if kind is TraceKind.IDLE:
        return "[SCHEDULER] Ready queue empty. Idling."
    if kind is TraceKind.YIELD:
        return "[KERNEL] Task requested a Yield."
    if kind is TraceKind.PRINT:
        return f"[KERNEL/OUT] Task {event.task_id} says: {event.message}"
    if kind is TraceKind.EXIT:
        return f"[KERNEL] Task {event.task_id} EXITED."
    if kind is TraceKind.BLOCK:
        return f"[KERNEL] Task {event.task_id} BLOCKED. Requires a new schedule."
    return "[KERNEL] All tasks completed. Shutting down."


class ListTraceSink:
    """Keeps every event in memory, in emission order."""

    def __init__(self) -> None:
        self.events: List[TraceEvent] = []

    def record(self, event: TraceEvent) -> None:
        self.events.append(event)

    def kinds(self) -> List[TraceKind]:
        return [e.kind for e in self.events]

    def of_kind(self, kind: TraceKind) -> List[TraceEvent]:
        return [e for e in self.events if e.kind is kind]

    def clear(self) -> None:
        self.events.clear()


class ConsoleTraceSink:
    """Prints each event as a bracketed console line."""

    def record(self, event: TraceEvent) -> None:
        print(format_event(event))


class LoggingTraceSink:
    """Forwards events to the standard logging module."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def record(self, event: TraceEvent) -> None:
        level = logging.DEBUG if event.kind in _CHATTY_KINDS else logging.INFO
        self._log.log(
            level,
            "tick=%d %s task=%s pc=%s %s",
            event.tick,
            event.kind.value,
            event.task_id,
            event.program_counter,
            event.message,
        )


class TeeTraceSink:
    """Fans each event out to several sinks."""

    def __init__(self, *sinks: TraceSink) -> None:
        self._sinks = sinks

    def record(self, event: TraceEvent) -> None:
        for sink in self._sinks:
            sink.record(event)


class NullTraceSink:
    """Discards everything."""

    def record(self, event: TraceEvent) -> None:
        pass
