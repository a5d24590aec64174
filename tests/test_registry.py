import threading

from modlaunch.local.launcher import ProcessRegistry
from tests.conftest import FakeProcess


def test_put_take_contains():
    registry = ProcessRegistry()
    group = [FakeProcess(1)]

    assert registry.put("/games/a", group) is None
    assert registry.contains("/games/a")
    assert registry.take("/games/a") == group
    assert not registry.contains("/games/a")
    assert registry.take("/games/a") is None


def test_put_overwrites_and_returns_replaced_group():
    registry = ProcessRegistry()
    first, second = [FakeProcess(1)], [FakeProcess(2)]

    registry.put("/games/a", first)
    replaced = registry.put("/games/a", second)

    assert replaced == first
    assert [p.pid for p in registry.take("/games/a")] == [2]
    # The first group's process is untracked, not stopped.
    assert first[0].alive


def test_concurrent_take_hands_group_to_exactly_one_caller():
    registry = ProcessRegistry()
    registry.put("/games/a", [FakeProcess(1)])
    barrier = threading.Barrier(8)
    results = []
    results_lock = threading.Lock()

    def worker():
        barrier.wait()
        group = registry.take("/games/a")
        with results_lock:
            results.append(group)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len([r for r in results if r is not None]) == 1
    assert len(registry) == 0


def test_launch_lock_is_per_key():
    registry = ProcessRegistry()

    assert registry.lock_for("/games/a") is registry.lock_for("/games/a")
    assert registry.lock_for("/games/a") is not registry.lock_for("/games/b")


def test_discard_if_only_removes_matching_group():
    registry = ProcessRegistry()
    old, new = [FakeProcess(1)], [FakeProcess(2)]
    registry.put("/games/a", new)

    assert not registry.discard_if("/games/a", old)
    assert registry.discard_if("/games/a", new)
    assert not registry.contains("/games/a")


def test_snapshot_is_a_copy():
    registry = ProcessRegistry()
    registry.put("/games/a", [FakeProcess(1)])

    snapshot = registry.snapshot()
    snapshot["/games/a"].append(FakeProcess(2))

    assert len(registry.get("/games/a")) == 1
