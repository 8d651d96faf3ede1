from __future__ import annotations

from typing import Dict, List, Tuple

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .metrics import preemption_points
from .models import ScheduleResult

COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]

RUN = "#"
WAIT = "-"
IDLE = " "
PREEMPT = "^"
AXIS_STEP = 5


def _lanes(result: ScheduleResult) -> Tuple[int, Dict[int, List[str]]]:
    """
    One row of cells per process, one cell per tick.

    A cell is RUN while the process holds the CPU, WAIT while it has arrived
    but is not running, and IDLE before arrival or after completion.
    """
    makespan = max((s.end_time for s in result.timeline), default=0)
    lanes: Dict[int, List[str]] = {}
    for p in sorted(result.processes, key=lambda p: p.pid):
        cells = [IDLE] * makespan
        end = p.completion_time if p.completion_time is not None else makespan
        for t in range(p.arrival_time, min(end, makespan)):
            cells[t] = WAIT
        lanes[p.pid] = cells
    for sl in result.timeline:
        lanes[sl.pid][sl.start_time:sl.end_time] = [RUN] * sl.length
    return makespan, lanes


def _marker_cells(result: ScheduleResult, makespan: int) -> List[str]:
    cells = [IDLE] * makespan
    for t in preemption_points(result):
        cells[t] = PREEMPT
    return cells


def _axis(makespan: int) -> str:
    cells = [IDLE] * (makespan + 1)
    for t in range(0, makespan + 1, AXIS_STEP):
        mark = str(t)
        if t + len(mark) > len(cells):
            cells.extend([IDLE] * (t + len(mark) - len(cells)))
        cells[t:t + len(mark)] = list(mark)
    return "".join(cells).rstrip()


def render_gantt(result: ScheduleResult) -> str:
    """
    Plain-text swimlane chart: ``#`` running, ``-`` ready but waiting,
    ``^`` under the tick where a preempting process took over.
    """
    if not result.timeline:
        return "(no execution)"

    makespan, lanes = _lanes(result)
    width = max(len(f"P{pid}") for pid in lanes) + 1

    lines = [f"Gantt Chart ({result.algorithm}):"]
    for pid, cells in lanes.items():
        lines.append(f"{f'P{pid}':<{width}}|{''.join(cells)}|")
    markers = "".join(_marker_cells(result, makespan)).rstrip()
    if markers:
        lines.append(" " * (width + 1) + markers)
    lines.append(" " * (width + 1) + _axis(makespan))
    return "\n".join(lines)


def build_rich_gantt(result: ScheduleResult) -> Panel:
    """
    Colored swimlane chart in a Rich Panel, one lane per process.
    """
    if not result.timeline:
        return Panel("No execution", title="Gantt Chart")

    makespan, lanes = _lanes(result)
    width = max(len(f"P{pid}") for pid in lanes) + 1

    table = Table.grid(padding=(0, 0))
    for idx, (pid, cells) in enumerate(lanes.items()):
        color = COLORS[idx % len(COLORS)]
        lane = Text(f"P{pid}".ljust(width), style="bold")
        for cell in cells:
            if cell == RUN:
                lane.append(" ", style=f"on {color}")
            elif cell == WAIT:
                lane.append("·", style="dim")
            else:
                lane.append(" ")
        table.add_row(lane)

    markers = "".join(_marker_cells(result, makespan)).rstrip()
    if markers:
        table.add_row(Text(" " * width + markers, style="bold red"))
    table.add_row(Text(" " * width + _axis(makespan), style="dim"))

    title = f"Gantt Chart: {result.algorithm}"
    if result.quantum is not None:
        title += f" (q={result.quantum})"
    return Panel.fit(table, title=title)
