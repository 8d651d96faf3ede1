from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import InvariantViolation


@dataclass
class Process:
    """
    One unit of work: static inputs plus the state an engine derives for it.

    Only ``pid``, ``arrival_time`` and ``burst_time`` are constructor
    arguments. Everything else is filled in while a simulation runs.
    """

    pid: int
    arrival_time: int
    burst_time: int

    remaining_time: int = field(init=False)
    start_time: Optional[int] = field(default=None, init=False)
    completion_time: Optional[int] = field(default=None, init=False)
    turnaround_time: Optional[int] = field(default=None, init=False)
    waiting_time: Optional[int] = field(default=None, init=False)
    response_time: Optional[int] = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.remaining_time = self.burst_time

    @property
    def is_complete(self) -> bool:
        return self.completion_time is not None

    def reset(self) -> None:
        self.remaining_time = self.burst_time
        self.start_time = None
        self.completion_time = None
        self.turnaround_time = None
        self.waiting_time = None
        self.response_time = None

    def dispatch(self, now: int) -> bool:
        """
        Record a dispatch at ``now``. Returns True only for the first one.
        """
        if self.start_time is not None:
            return False
        if now < self.arrival_time:
            raise InvariantViolation(
                f"process {self.pid} dispatched at {now} before its arrival at {self.arrival_time}"
            )
        self.start_time = now
        self.response_time = now - self.arrival_time
        return True

    def execute(self, ticks: int) -> None:
        if ticks <= 0 or ticks > self.remaining_time:
            raise InvariantViolation(
                f"process {self.pid} cannot run {ticks} tick(s) with {self.remaining_time} remaining"
            )
        self.remaining_time -= ticks

    def complete(self, now: int) -> None:
        if self.completion_time is not None:
            raise InvariantViolation(f"process {self.pid} completed twice")
        if self.remaining_time != 0:
            raise InvariantViolation(
                f"process {self.pid} completed with {self.remaining_time} tick(s) of work left"
            )
        self.completion_time = now
        self.turnaround_time = now - self.arrival_time
        self.waiting_time = self.turnaround_time - self.burst_time


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start_time: int
    end_time: int

    @property
    def length(self) -> int:
        return self.end_time - self.start_time


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    context_switches: int = 0
    preemptions: int = 0


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    processes: List[Process] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    system: Optional[SystemMetrics] = None
