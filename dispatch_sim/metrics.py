from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from .models import Process, ScheduleResult, SystemMetrics

# Averages each algorithm reports alongside its per-process table.
REPORTED_AVERAGES: Dict[str, Tuple[str, ...]] = {
    "rr": ("avg_turnaround", "avg_response"),
    "srt": ("avg_turnaround", "avg_waiting"),
}


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute throughput and CPU utilization given populated per-process metrics
    and timeline slices.
    """
    if not result.processes:
        return SystemMetrics(cpu_busy_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)

    makespan = max(p.completion_time or 0 for p in result.processes)
    cpu_busy_time = sum(slice_.length for slice_ in result.timeline)

    throughput = len(result.processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        context_switches=count_context_switches(result),
        preemptions=len(preemption_points(result)),
    )
    result.system = system
    return system


def count_context_switches(result: ScheduleResult) -> int:
    timeline = sorted(result.timeline, key=lambda s: s.start_time)
    return sum(1 for prev, cur in zip(timeline, timeline[1:]) if prev.pid != cur.pid)


def preemption_points(result: ScheduleResult) -> List[int]:
    """
    Times at which a process lost the CPU to another one with work still left.
    """
    completion = {p.pid: p.completion_time for p in result.processes}
    timeline = sorted(result.timeline, key=lambda s: s.start_time)
    return [
        prev.end_time
        for prev, cur in zip(timeline, timeline[1:])
        if prev.pid != cur.pid
        and prev.end_time == cur.start_time
        and prev.end_time != completion.get(prev.pid)
    ]


def summarize_process_metrics(processes: Sequence[Process]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time or 0 for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time or 0 for p in processes) / n,
        "avg_response": sum(p.response_time or 0 for p in processes) / n,
    }


def reported_averages(algorithm: str, processes: Sequence[Process]) -> List[Tuple[str, float]]:
    """
    The ``(name, value)`` averages an algorithm is judged by, in display order.
    """
    summary = summarize_process_metrics(processes)
    return [(key, summary[key]) for key in REPORTED_AVERAGES[algorithm]]
