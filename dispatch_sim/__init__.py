"""
Preemptive CPU scheduling simulator.

Runs a fixed batch of processes through Round Robin or Shortest Remaining
Time scheduling and derives per-process timing metrics.
"""

from .algorithms import ALGORITHMS, run_algorithm, schedule_rr, schedule_srt
from .errors import ConfigurationError, InvariantViolation, SchedulerError, WorkloadFormatError
from .models import Process, ScheduledSlice, ScheduleResult, SystemMetrics

__all__ = [
    "ALGORITHMS",
    "ConfigurationError",
    "InvariantViolation",
    "Process",
    "ScheduleResult",
    "ScheduledSlice",
    "SchedulerError",
    "SystemMetrics",
    "WorkloadFormatError",
    "run_algorithm",
    "schedule_rr",
    "schedule_srt",
]
