from __future__ import annotations

import heapq
import logging
from collections import deque
from typing import Deque, Dict, List, Optional, Sequence, Set, Tuple

from .errors import ConfigurationError, InvariantViolation
from .metrics import compute_system_metrics
from .models import Process, ScheduleResult, ScheduledSlice

logger = logging.getLogger(__name__)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_workload(processes: Sequence[Process]) -> Dict[int, Process]:
    """
    Check a workload and return its records keyed by pid, in caller order.

    Nothing is mutated, so a rejected workload is left untouched.
    """
    if not processes:
        raise ConfigurationError("workload must contain at least one process")

    table: Dict[int, Process] = {}
    for p in processes:
        if p.pid in table:
            raise ConfigurationError(f"duplicate pid {p.pid!r} in workload")
        if not _is_int(p.burst_time) or not _is_int(p.arrival_time):
            raise ConfigurationError(
                f"process {p.pid}: arrival_time and burst_time must be integers, "
                f"got {p.arrival_time!r} and {p.burst_time!r}"
            )
        if p.burst_time <= 0:
            raise ConfigurationError(f"process {p.pid}: burst_time must be positive, got {p.burst_time}")
        if p.arrival_time < 0:
            raise ConfigurationError(f"process {p.pid}: arrival_time cannot be negative, got {p.arrival_time}")
        table[p.pid] = p
    return table


def _validate_quantum(quantum: Optional[int]) -> int:
    if quantum is None or not _is_int(quantum):
        raise ConfigurationError("Round Robin requires an integer quantum (use --quantum)")
    if quantum <= 0:
        raise ConfigurationError(f"Round Robin requires a positive quantum, got {quantum}")
    return quantum


def _lookup(table: Dict[int, Process], pid: int) -> Process:
    try:
        return table[pid]
    except KeyError:
        raise InvariantViolation(f"pid {pid} in ready structure has no process record") from None


def _record_slice(timeline: List[ScheduledSlice], pid: int, start: int, end: int) -> None:
    # Consecutive runs of the same process are one slice.
    if timeline and timeline[-1].pid == pid and timeline[-1].end_time == start:
        timeline[-1].end_time = end
    else:
        timeline.append(ScheduledSlice(pid=pid, start_time=start, end_time=end))


def schedule_rr(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes join a FIFO ready queue when they arrive; simultaneous
    arrivals join in ascending pid order. A preempted process goes back to
    the tail only after everything that arrived during its slice.
    """
    quantum = _validate_quantum(quantum)
    table = _validate_workload(processes)
    for p in table.values():
        p.reset()

    by_pid = sorted(table.values(), key=lambda p: p.pid)
    ready: Deque[int] = deque()
    queued: Set[int] = set()
    timeline: List[ScheduledSlice] = []
    completed = 0

    def admit_arrivals(current_time: int, running: Optional[int] = None) -> None:
        for p in by_pid:
            if (
                p.arrival_time <= current_time
                and not p.is_complete
                and p.pid not in queued
                and p.pid != running
            ):
                ready.append(p.pid)
                queued.add(p.pid)

    time = min(p.arrival_time for p in by_pid)
    admit_arrivals(time)

    while completed < len(by_pid):
        if not ready:
            # CPU idle: jump straight to the next arrival.
            time = min(p.arrival_time for p in by_pid if not p.is_complete)
            logger.debug("rr: idle until t=%d", time)
            admit_arrivals(time)
            continue

        pid = ready.popleft()
        queued.discard(pid)
        p = _lookup(table, pid)

        if p.dispatch(time):
            logger.debug("rr: t=%d first dispatch of pid %s (response %d)", time, pid, p.response_time)

        run_time = min(quantum, p.remaining_time)
        p.execute(run_time)
        timeline.append(ScheduledSlice(pid=pid, start_time=time, end_time=time + run_time))
        time += run_time

        if p.remaining_time == 0:
            p.complete(time)
            completed += 1
            logger.debug("rr: t=%d pid %s completed (turnaround %d)", time, pid, p.turnaround_time)
            admit_arrivals(time)
        else:
            admit_arrivals(time, running=pid)
            ready.append(pid)
            queued.add(pid)
            logger.debug("rr: t=%d pid %s preempted with %d remaining", time, pid, p.remaining_time)

    result = ScheduleResult(algorithm="Round Robin", quantum=quantum, processes=list(processes), timeline=timeline)
    compute_system_metrics(result)
    logger.info("rr: %d process(es) finished at t=%d", len(by_pid), time)
    return result


def schedule_srt(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Remaining Time (preemptive SJF), simulated one tick at a time.

    Every tick admits new arrivals and then runs whichever admitted process
    has the least work left. Ties go to the process that arrived first
    (stable arrival order, so equal arrivals keep their input order).
    ``quantum`` is accepted for a uniform call signature and ignored.
    """
    table = _validate_workload(processes)
    for p in table.values():
        p.reset()

    arrivals: Deque[Process] = deque(sorted(table.values(), key=lambda p: p.arrival_time))
    rank = {p.pid: i for i, p in enumerate(arrivals)}

    heap: List[Tuple[int, int, int]] = []
    timeline: List[ScheduledSlice] = []
    time = 0
    completed = 0
    previous: Optional[int] = None

    while completed < len(table):
        while arrivals and arrivals[0].arrival_time <= time:
            p = arrivals.popleft()
            heapq.heappush(heap, (p.remaining_time, rank[p.pid], p.pid))

        if not heap:
            time += 1
            previous = None
            continue

        remaining, _, pid = heapq.heappop(heap)
        p = _lookup(table, pid)
        if remaining != p.remaining_time:
            raise InvariantViolation(
                f"stale key for pid {pid}: queued with {remaining}, record has {p.remaining_time}"
            )

        if previous is not None and previous != pid:
            logger.debug("srt: t=%d pid %s preempts pid %s", time, pid, previous)
        if p.dispatch(time):
            logger.debug("srt: t=%d first dispatch of pid %s", time, pid)

        p.execute(1)
        _record_slice(timeline, pid, time, time + 1)
        time += 1
        previous = pid

        if p.remaining_time == 0:
            p.complete(time)
            completed += 1
            previous = None
            logger.debug("srt: t=%d pid %s completed (waiting %d)", time, pid, p.waiting_time)
        else:
            heapq.heappush(heap, (p.remaining_time, rank[pid], pid))

    result = ScheduleResult(algorithm="SRT", quantum=None, processes=list(processes), timeline=timeline)
    compute_system_metrics(result)
    logger.info("srt: %d process(es) finished at t=%d", len(table), time)
    return result


ALGORITHMS = {
    "rr": schedule_rr,
    "srt": schedule_srt,
}

ALIASES = {
    "srtf": "srt",
    "round-robin": "rr",
}


def canonical_name(name: str) -> str:
    name = name.lower()
    name = ALIASES.get(name, name)
    if name not in ALGORITHMS:
        raise ConfigurationError(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHMS)})")
    return name


def run_algorithm(name: str, processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Dispatch to the requested algorithm. Quantum is only used by round-robin.
    """
    func = ALGORITHMS[canonical_name(name)]
    return func(processes, quantum=quantum)
