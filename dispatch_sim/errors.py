from __future__ import annotations


class SchedulerError(Exception):
    """Base class for every error raised by the simulator."""


class ConfigurationError(SchedulerError, ValueError):
    """
    The workload or engine parameters cannot be simulated.

    Raised before any process record is touched, so a failed call leaves the
    caller's records exactly as they were.
    """


class InvariantViolation(SchedulerError, RuntimeError):
    """Internal scheduler state became inconsistent. Always a defect."""


class WorkloadFormatError(SchedulerError, ValueError):
    """A workload file could not be parsed into process records."""
