import threading

from whosolder.features.ratelimit.service import check_rate_limit

# 2025-11-20T12:00:00Z, 20s into a 60s window
T0 = 1763640000.0 + 20


def test_twenty_allowed_then_denied(memory_store):
    for _ in range(20):
        assert check_rate_limit(memory_store, "c1", now=T0).allowed

    denied = check_rate_limit(memory_store, "c1", now=T0)
    assert not denied.allowed
    assert 1 <= denied.retry_after <= 60
    assert denied.retry_after == 40


def test_new_window_resets(memory_store):
    for _ in range(21):
        check_rate_limit(memory_store, "c1", now=T0)
    assert check_rate_limit(memory_store, "c1", now=T0 + 60).allowed


def test_clients_are_independent(memory_store):
    for _ in range(21):
        check_rate_limit(memory_store, "noisy", now=T0)
    assert check_rate_limit(memory_store, "quiet", now=T0).allowed


def test_custom_limit_and_window(memory_store):
    assert check_rate_limit(memory_store, "c", limit=1, window_seconds=10, now=105.5).allowed
    denied = check_rate_limit(memory_store, "c", limit=1, window_seconds=10, now=105.5)
    assert not denied.allowed
    assert denied.retry_after == 5


def test_no_store_fails_open():
    for _ in range(100):
        assert check_rate_limit(None, "c1", now=T0).allowed


def test_concurrent_requests_are_all_counted(memory_store):
    results = []
    lock = threading.Lock()

    def worker():
        for _ in range(10):
            result = check_rate_limit(memory_store, "shared", now=T0)
            with lock:
                results.append(result.allowed)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 80
    assert results.count(True) == 20


def test_sql_store_upsert_counts(sql_store):
    for _ in range(20):
        assert check_rate_limit(sql_store, "c1", now=T0).allowed
    assert not check_rate_limit(sql_store, "c1", now=T0).allowed
    assert check_rate_limit(sql_store, "c1", now=T0 + 60).allowed
