"""CLI entry point for the round-robin kernel simulator."""

from __future__ import annotations

import argparse
import logging
from typing import Dict, List, Optional

from kernel_sim.metrics.performance import compute_metrics
from kernel_sim.simulator.errors import WorkloadError
from kernel_sim.simulator.kernel import DEFAULT_TIME_SLICE, Kernel, TickOutcome
from kernel_sim.simulator.trace import (
    ConsoleTraceSink,
    ListTraceSink,
    LoggingTraceSink,
    TeeTraceSink,
    TraceSink,
)
from kernel_sim.workload.generator import (
    Workload,
    boot,
    demo_workload,
    generate_workload,
    load_workload,
)
from kernel_sim.workload.scripts import ScriptedProgram

DEFAULT_MAX_TICKS = 20


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Round Robin Kernel Simulator",
    )
    parser.add_argument(
        "--max-ticks",
        type=int,
        default=DEFAULT_MAX_TICKS,
        help=f"Stop after this many ticks; 0 runs until idle (default: {DEFAULT_MAX_TICKS})",
    )
    parser.add_argument(
        "--time-slice",
        type=int,
        default=DEFAULT_TIME_SLICE,
        help=f"Preempt every N ticks (default: {DEFAULT_TIME_SLICE})",
    )
    parser.add_argument(
        "--workload",
        type=str,
        choices=["demo", "random"],
        default="demo",
        help="Built-in workload: demo (three scripted tasks) or random (default: demo)",
    )
    parser.add_argument(
        "--workload-file",
        type=str,
        default=None,
        help="Load task scripts from a JSON file instead of a built-in workload",
    )
    parser.add_argument(
        "--tasks",
        type=int,
        default=3,
        help="Number of tasks for the random workload (default: 3)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for workload generation (default: 42)",
    )
    parser.add_argument(
        "--trace",
        type=str,
        choices=["console", "log", "none"],
        default="console",
        help="Where scheduling events go (default: console)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    return parser


def make_workload(args: argparse.Namespace) -> Workload:
    """Pick the workload requested on the command line."""
    if args.workload_file:
        return load_workload(args.workload_file)
    if args.workload == "random":
        return generate_workload(num_tasks=args.tasks, seed=args.seed)
    return demo_workload()


def make_sink(trace: str, recorder: ListTraceSink) -> TraceSink:
    if trace == "console":
        return TeeTraceSink(recorder, ConsoleTraceSink())
    if trace == "log":
        return TeeTraceSink(recorder, LoggingTraceSink())
    return recorder


def run(kernel: Kernel, max_ticks: Optional[int] = None) -> int:
    """Drive *kernel* until it runs out of work or hits *max_ticks*.

    Performs the initial schedule before the first tick.

    Returns:
        The kernel tick counter when the run stopped.
    """
    kernel.schedule()
    while kernel.tick() is TickOutcome.CONTINUE:
        if max_ticks and kernel.ticks >= max_ticks:
            break
    return kernel.ticks


def print_results(kernel: Kernel, metrics: Dict[str, float]) -> None:
    """Print the final task state and summary statistics to stdout."""
    print("\n--- Simulation End ---")
    print(f"Total Ticks: {kernel.ticks}")

    print("\n--- Final Task State ---")
    for task in kernel.live_tasks():
        print(task)
    print("\n(Note: Exited and Blocked tasks are no longer tracked in the queues.)")

    separator = "-" * 40
    print(f"\n=== Scheduling Summary | time_slice={kernel.time_slice} ===\n")
    print(f"  Busy Ticks:       {metrics['busy_ticks']:>6}")
    print(f"  CPU Utilization:  {metrics['cpu_utilization']:>6.1f}%")
    print(f"  Dispatches:       {metrics['dispatches']:>6}")
    print(f"  Preemptions:      {metrics['preemptions']:>6}")
    print(f"  Yields:           {metrics['yields']:>6}")
    print(f"  Exits / Blocks:   {metrics['exits']:>3} / {metrics['blocks']}")
    print(separator)
    print(f"  Avg Ready Wait:   {metrics['avg_ready_wait']:.2f}")
    print(f"  P99 Ready Wait:   {metrics['p99_ready_wait']:.2f}")
    print()


def main(argv: List[str] | None = None) -> None:
    """Parse arguments, run simulation, print results."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.time_slice <= 0:
        parser.error(f"--time-slice must be positive, got {args.time_slice}")
    if args.max_ticks < 0:
        parser.error(f"--max-ticks must be non-negative, got {args.max_ticks}")
    if args.tasks <= 0:
        parser.error(f"--tasks must be positive, got {args.tasks}")

    try:
        workload = make_workload(args)
    except WorkloadError as e:
        parser.error(str(e))

    recorder = ListTraceSink()
    program = ScriptedProgram()
    kernel = Kernel(
        program=program,
        sink=make_sink(args.trace, recorder),
        time_slice=args.time_slice,
    )

    print("--- Kernel Simulation Start ---")
    boot(kernel, program, workload)
    run(kernel, max_ticks=args.max_ticks)
    print_results(kernel, compute_metrics(recorder.events))


if __name__ == "__main__":
    main()
