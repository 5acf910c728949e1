"""Error types raised by the kernel simulator.

Scheduling itself never fails; these cover contract violations by
callers and malformed workload configuration.
"""

from __future__ import annotations


class KernelError(Exception):
    """Base class for all simulator errors."""


class TaskStateError(KernelError, RuntimeError):
    """A task was handed to a component in a state it cannot accept."""


class WorkloadError(KernelError, ValueError):
    """A workload definition is missing fields or has invalid values."""
