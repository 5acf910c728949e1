"""Kernel calls a running task can issue."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class CallKind(Enum):
    """Service requested from the kernel."""

    YIELD = auto()
    PRINT = auto()
    EXIT = auto()
    BLOCK = auto()


@dataclass(frozen=True)
class KernelCall:
    """A single request from the running task.

    Only ``PRINT`` carries a payload.  Calls are produced by the task
    program once per tick and handed straight to the dispatcher.
    """

    kind: CallKind
    message: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind is CallKind.PRINT and self.message is None:
            raise ValueError("PRINT calls require a message")
        if self.kind is not CallKind.PRINT and self.message is not None:
            raise ValueError(f"{self.kind.name} calls take no message")

    def __str__(self) -> str:
        if self.kind is CallKind.PRINT:
            return f"Print({self.message!r})"
        return self.kind.name.capitalize()


YIELD = KernelCall(CallKind.YIELD)
EXIT = KernelCall(CallKind.EXIT)
BLOCK = KernelCall(CallKind.BLOCK)


def print_call(message: str) -> KernelCall:
    """Build a ``PRINT`` call carrying *message*."""
    return KernelCall(CallKind.PRINT, message)
