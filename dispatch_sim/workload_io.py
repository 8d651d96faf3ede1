from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import List

from .errors import WorkloadFormatError
from .models import Process

FIELDS = ("pid", "arrival_time", "burst_time")


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise WorkloadFormatError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except UnicodeDecodeError as exc:
            raise WorkloadFormatError(f"{path}: not UTF-8 text ({exc.reason})") from exc
        except json.JSONDecodeError as exc:
            raise WorkloadFormatError(f"{path}: invalid JSON ({exc})") from exc

    if not isinstance(raw, list):
        raise WorkloadFormatError("JSON workload must be a list of process objects")

    processes: List[Process] = []
    for entry in raw:
        if not isinstance(entry, dict):
            raise WorkloadFormatError(f"Invalid process entry: {entry!r}")
        # JSON numbers must already be integers; int() would truncate 2.7 to 2.
        for name in FIELDS:
            value = entry.get(name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise WorkloadFormatError(f"Invalid process entry: {name} must be an integer in {entry!r}")
        processes.append(_process_from_mapping(entry))

    return processes


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        try:
            for row in csv.DictReader(f):
                processes.append(_process_from_mapping(row))
        except UnicodeDecodeError as exc:
            raise WorkloadFormatError(f"{path}: not UTF-8 text ({exc.reason})") from exc
    return processes


def _process_from_mapping(mapping) -> Process:
    try:
        pid, arrival_time, burst_time = (int(mapping[name]) for name in FIELDS)
    except (KeyError, TypeError, ValueError) as exc:
        raise WorkloadFormatError(f"Invalid process entry: {mapping!r}") from exc

    return Process(pid=pid, arrival_time=arrival_time, burst_time=burst_time)
