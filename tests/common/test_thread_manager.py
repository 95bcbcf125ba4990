import threading

import pytest

from photomedia.common.concurrency.thread_manager import ThreadManager


def test_submit_runs_and_counts():
    with ThreadManager(name="t", max_workers=2) as tm:
        futs = [tm.submit(lambda x: x * 2, i) for i in range(5)]
        assert sorted(f.result(timeout=5) for f in futs) == [0, 2, 4, 6, 8]
    st = tm.stats()
    assert st.submitted == 5
    assert st.completed == 5
    assert st.failed == 0
    assert st.in_flight == 0


def test_failures_are_counted_and_propagated():
    tm = ThreadManager(name="t", max_workers=1, log_exceptions=False)
    fut = tm.submit(lambda: 1 / 0)
    with pytest.raises(ZeroDivisionError):
        fut.result(timeout=5)
    tm.shutdown()
    assert tm.stats().failed == 1


def test_pool_is_bounded():
    gate = threading.Event()
    running = []
    lock = threading.Lock()
    peak = [0]

    def job():
        with lock:
            running.append(1)
            peak[0] = max(peak[0], len(running))
        gate.wait(5)
        with lock:
            running.pop()

    tm = ThreadManager(name="t", max_workers=2)
    futs = [tm.submit(job) for _ in range(6)]
    gate.set()
    for f in futs:
        f.result(timeout=5)
    tm.shutdown()
    assert peak[0] <= 2


def test_submit_after_shutdown_raises():
    tm = ThreadManager(name="t", max_workers=1)
    tm.shutdown()
    tm.shutdown()  # idempotent
    with pytest.raises(RuntimeError):
        tm.submit(lambda: None)
    assert tm.stats().rejected == 1


def test_rejects_empty_pool():
    with pytest.raises(ValueError):
        ThreadManager(name="t", max_workers=0)
