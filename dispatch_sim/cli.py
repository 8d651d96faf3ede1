from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .algorithms import ALGORITHMS, canonical_name, run_algorithm
from .errors import ConfigurationError, WorkloadFormatError
from .gantt import build_rich_gantt, render_gantt
from .metrics import reported_averages, summarize_process_metrics
from .models import ScheduleResult
from .workload_io import load_workload

AVERAGE_LABELS = {
    "avg_waiting": "Avg waiting",
    "avg_turnaround": "Avg turnaround",
    "avg_response": "Avg response",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dispatch-sim",
        description="Preemptive CPU scheduling simulator (Round Robin, Shortest Remaining Time).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every dispatch, preemption and completion.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help="Algorithm to use (rr, srt).",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for round-robin (ignored by srt).",
    )
    run_parser.add_argument(
        "--timeline",
        action="store_true",
        help="Also list every execution slice.",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Draw the Gantt chart as plain text instead of colored lanes.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run several algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=list(ALGORITHMS),
        help="Algorithms to compare (default: rr srt).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=2,
        help="Time quantum used for round-robin (default: 2).",
    )

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def _print_result(
    result: ScheduleResult,
    name: str,
    console: Console,
    show_timeline: bool = False,
    plain: bool = False,
) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    if plain:
        console.print(render_gantt(result), markup=False, highlight=False, soft_wrap=True)
    else:
        console.print(build_rich_gantt(result))

    console.print()

    if show_timeline:
        slice_table = Table(title="Execution slices", box=box.SIMPLE_HEAVY)
        slice_table.add_column("PID", justify="center")
        slice_table.add_column("Start", justify="right")
        slice_table.add_column("End", justify="right")
        for sl in result.timeline:
            slice_table.add_row(str(sl.pid), str(sl.start_time), str(sl.end_time))
        console.print(slice_table)
        console.print()

    headers = ["PID", "Arrive", "Burst", "Start", "Complete", "Wait", "Turnaround", "Response"]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        proc_table.add_column(h, justify="center" if h == "PID" else "right")

    for p in result.processes:
        proc_table.add_row(
            str(p.pid),
            str(p.arrival_time),
            str(p.burst_time),
            str(p.start_time),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.response_time),
        )

    console.print(proc_table)
    console.print()

    if result.system:
        system = result.system
        system_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
        system_table.add_column("Metric")
        system_table.add_column("Value", justify="right")

        for key, value in reported_averages(name, result.processes):
            system_table.add_row(AVERAGE_LABELS[key], f"{value:.2f}")
        system_table.add_row("Makespan", str(system.makespan))
        system_table.add_row("Throughput (proc/time)", f"{system.throughput:.3f}")
        system_table.add_row("CPU utilization", f"{system.cpu_utilization*100:.1f}%")
        system_table.add_row("Context switches", str(system.context_switches))
        system_table.add_row("Preemptions", str(system.preemptions))

        console.print(system_table)


def _run_compare(workload_path: Path, algorithms: List[str], quantum: int, console: Console) -> None:
    processes = load_workload(workload_path)

    summary_table = Table(title=f"Algorithm comparison: {workload_path}", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    for label in AVERAGE_LABELS.values():
        summary_table.add_column(label, justify="right")
    summary_table.add_column("Context switches", justify="right")

    for alg in algorithms:
        q = quantum if canonical_name(alg) == "rr" else None
        # Engines reset the records they are given, so each run starts clean.
        result = run_algorithm(alg, processes, quantum=q)
        summary = summarize_process_metrics(result.processes)
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            *(f"{summary[key]:.2f}" for key in AVERAGE_LABELS),
            str(result.system.context_switches) if result.system else "",
        )

    console.print(summary_table)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    try:
        if args.command == "run":
            name = canonical_name(args.algorithm)
            processes = load_workload(Path(args.workload))
            result = run_algorithm(name, processes, quantum=args.quantum)
            _print_result(result, name, console, show_timeline=args.timeline, plain=args.plain)
            return 0

        if args.command == "compare":
            _run_compare(Path(args.workload), args.algorithms, args.quantum, console)
            return 0
    except (ConfigurationError, WorkloadFormatError, OSError) as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
