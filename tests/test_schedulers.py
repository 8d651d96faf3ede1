import pytest

from dispatch_sim.algorithms import run_algorithm, schedule_rr, schedule_srt
from dispatch_sim.errors import ConfigurationError
from dispatch_sim.models import Process


def _procs():
    return [
        Process(0, arrival_time=0, burst_time=8),
        Process(1, arrival_time=1, burst_time=4),
        Process(2, arrival_time=2, burst_time=9),
        Process(3, arrival_time=3, burst_time=5),
    ]


def _by_pid(result):
    return {p.pid: p for p in result.processes}


def _check_completed(result):
    for p in result.processes:
        assert p.remaining_time == 0
        assert p.start_time >= p.arrival_time
        assert p.completion_time >= p.arrival_time
        assert p.turnaround_time == p.completion_time - p.arrival_time
        assert p.turnaround_time >= p.burst_time
        assert p.waiting_time == p.turnaround_time - p.burst_time >= 0
        assert p.response_time == p.start_time - p.arrival_time


def test_rr_quantum_3_trace():
    res = schedule_rr(_procs(), quantum=3)
    procs = _by_pid(res)
    assert [procs[pid].response_time for pid in range(4)] == [0, 2, 4, 6]
    assert [procs[pid].turnaround_time for pid in range(4)] == [23, 15, 24, 18]
    assert [s.pid for s in res.timeline] == [0, 1, 2, 3, 0, 1, 2, 3, 0, 2]
    _check_completed(res)


def test_rr_arrivals_join_before_preempted_process():
    procs = [
        Process(0, arrival_time=0, burst_time=4),
        Process(1, arrival_time=1, burst_time=2),
    ]
    res = schedule_rr(procs, quantum=2)
    assert [(s.pid, s.start_time, s.end_time) for s in res.timeline] == [
        (0, 0, 2),
        (1, 2, 4),
        (0, 4, 6),
    ]


def test_rr_large_quantum_is_fcfs():
    procs = [
        Process(0, arrival_time=0, burst_time=5),
        Process(1, arrival_time=1, burst_time=3),
        Process(2, arrival_time=2, burst_time=8),
    ]
    res = schedule_rr(procs, quantum=8)
    assert [s.pid for s in res.timeline] == [0, 1, 2]
    assert [p.response_time for p in res.processes] == [0, 4, 6]
    assert all(p.response_time == p.waiting_time for p in res.processes)


def test_rr_idle_gap_skips_to_next_arrival():
    procs = [
        Process(0, arrival_time=0, burst_time=2),
        Process(1, arrival_time=5, burst_time=3),
    ]
    res = schedule_rr(procs, quantum=2)
    p1 = _by_pid(res)[1]
    assert p1.start_time == 5
    assert p1.response_time == 0
    assert p1.completion_time == 8
    assert res.system.cpu_busy_time == 5
    assert res.system.makespan == 8


def test_rr_seeds_with_earliest_arrival_not_pid_zero():
    procs = [
        Process(0, arrival_time=4, burst_time=2),
        Process(1, arrival_time=0, burst_time=3),
    ]
    res = schedule_rr(procs, quantum=2)
    assert res.timeline[0].pid == 1
    assert res.timeline[0].start_time == 0
    _check_completed(res)


def test_rr_identical_arrivals_run_in_pid_order():
    procs = [Process(pid, arrival_time=0, burst_time=2) for pid in (2, 0, 1)]
    res = schedule_rr(procs, quantum=2)
    assert [s.pid for s in res.timeline] == [0, 1, 2]
    # Caller order is preserved in the result.
    assert [p.pid for p in res.processes] == [2, 0, 1]


def test_srt_same_workload():
    res = schedule_srt(_procs())
    procs = _by_pid(res)
    assert [procs[pid].start_time for pid in range(4)] == [0, 1, 17, 5]
    assert [procs[pid].completion_time for pid in range(4)] == [17, 5, 26, 10]
    assert [procs[pid].turnaround_time for pid in range(4)] == [17, 4, 24, 7]
    assert [procs[pid].waiting_time for pid in range(4)] == [9, 0, 15, 2]
    assert [(s.pid, s.start_time, s.end_time) for s in res.timeline] == [
        (0, 0, 1),
        (1, 1, 5),
        (3, 5, 10),
        (0, 10, 17),
        (2, 17, 26),
    ]
    _check_completed(res)


def test_srt_never_runs_longer_job_over_shorter_one():
    procs = [
        Process(0, arrival_time=0, burst_time=7),
        Process(1, arrival_time=2, burst_time=4),
        Process(2, arrival_time=4, burst_time=1),
        Process(3, arrival_time=5, burst_time=4),
    ]
    res = schedule_srt(procs)

    remaining = {p.pid: p.burst_time for p in procs}
    arrival = {p.pid: p.arrival_time for p in procs}
    for sl in res.timeline:
        for t in range(sl.start_time, sl.end_time):
            admitted = [pid for pid, left in remaining.items() if left > 0 and arrival[pid] <= t]
            assert remaining[sl.pid] == min(remaining[pid] for pid in admitted)
            remaining[sl.pid] -= 1
    assert all(left == 0 for left in remaining.values())


def test_srt_order_independent_input():
    forward = schedule_srt(_procs())
    backward = schedule_srt(list(reversed(_procs())))
    assert {p.pid: p.completion_time for p in forward.processes} == {
        p.pid: p.completion_time for p in backward.processes
    }


def test_srt_identical_arrivals_keep_input_order():
    procs = [Process(pid, arrival_time=0, burst_time=3) for pid in (5, 1, 9)]
    res = schedule_srt(procs)
    assert [s.pid for s in res.timeline] == [5, 1, 9]


def test_srt_idle_ticks_before_first_arrival():
    procs = [
        Process(0, arrival_time=0, burst_time=2),
        Process(1, arrival_time=5, burst_time=3),
    ]
    res = schedule_srt(procs)
    assert [(s.pid, s.start_time, s.end_time) for s in res.timeline] == [(0, 0, 2), (1, 5, 8)]
    assert res.quantum is None


@pytest.mark.parametrize("algorithm", ["rr", "srt"])
def test_single_process(algorithm):
    res = run_algorithm(algorithm, [Process(7, arrival_time=3, burst_time=4)], quantum=2)
    p = res.processes[0]
    assert p.start_time == 3
    assert p.completion_time == 7
    assert p.waiting_time == 0
    assert p.response_time == 0


@pytest.mark.parametrize("algorithm", ["rr", "srt"])
def test_conservation_of_work(algorithm):
    res = run_algorithm(algorithm, _procs(), quantum=3)
    assert sum(s.length for s in res.timeline) == sum(p.burst_time for p in _procs())
    assert res.system.cpu_busy_time == 26


@pytest.mark.parametrize("algorithm", ["rr", "srt"])
def test_deterministic_on_fresh_copies(algorithm):
    def snapshot(result):
        return [
            (p.pid, p.start_time, p.completion_time, p.turnaround_time, p.waiting_time, p.response_time)
            for p in result.processes
        ]

    first = run_algorithm(algorithm, _procs(), quantum=3)
    second = run_algorithm(algorithm, _procs(), quantum=3)
    assert snapshot(first) == snapshot(second)
    assert first.timeline == second.timeline


@pytest.mark.parametrize("algorithm", ["rr", "srt"])
def test_rerun_on_same_records(algorithm):
    procs = _procs()
    first = [p.completion_time for p in run_algorithm(algorithm, procs, quantum=3).processes]
    second = [p.completion_time for p in run_algorithm(algorithm, procs, quantum=3).processes]
    assert first == second


def test_non_contiguous_pids():
    procs = [
        Process(42, arrival_time=0, burst_time=3),
        Process(7, arrival_time=1, burst_time=1),
    ]
    rr = _by_pid(schedule_rr(procs, quantum=1))
    assert rr[42].completion_time == 4
    assert rr[7].completion_time == 2
    srt = _by_pid(schedule_srt(procs))
    assert srt[7].completion_time == 2
    assert srt[42].completion_time == 4


def test_srtf_alias():
    res = run_algorithm("SRTF", _procs())
    assert res.algorithm == "SRT"


@pytest.mark.parametrize("quantum", [None, 0, -3])
def test_rr_rejects_bad_quantum(quantum):
    with pytest.raises(ConfigurationError):
        schedule_rr(_procs(), quantum=quantum)


@pytest.mark.parametrize("algorithm", ["rr", "srt"])
@pytest.mark.parametrize(
    "procs",
    [
        [],
        [Process(0, arrival_time=0, burst_time=0)],
        [Process(0, arrival_time=-1, burst_time=2)],
        [Process(0, arrival_time=0, burst_time=2.5)],
        [Process(0, arrival_time=0.5, burst_time=2)],
        [Process(0, arrival_time=0, burst_time=True)],
        [Process(0, arrival_time=0, burst_time=2), Process(0, arrival_time=1, burst_time=2)],
    ],
)
def test_configuration_errors(algorithm, procs):
    with pytest.raises(ConfigurationError):
        run_algorithm(algorithm, procs, quantum=2)


def test_rejected_workload_is_left_untouched():
    procs = _procs()
    schedule_srt(procs)
    before = [p.completion_time for p in procs]
    with pytest.raises(ConfigurationError):
        schedule_srt(procs + [Process(9, arrival_time=0, burst_time=-1)])
    assert [p.completion_time for p in procs] == before


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        schedule_rr(_procs(), quantum=0)


def test_unknown_algorithm():
    with pytest.raises(ConfigurationError):
        run_algorithm("lottery", _procs())


def test_fractional_burst_rejected_before_simulation():
    p = Process(0, arrival_time=0, burst_time=2.5)
    with pytest.raises(ConfigurationError):
        schedule_srt([p])
    assert p.start_time is None
    assert p.remaining_time == 2.5
