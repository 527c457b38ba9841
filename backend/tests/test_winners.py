import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from delfos.errors import StorageError


def test_missing_file_reads_zero(ledger):
    assert not os.path.exists(ledger.path)
    assert ledger.read() == 0


def test_increment_persists_decimal(ledger):
    assert ledger.increment() == 1
    assert ledger.increment('a@x.com', 's1') == 2
    with open(ledger.path, encoding='ascii') as fh:
        assert fh.read() == '2'
    assert ledger.read() == 2


def test_reset(ledger):
    ledger.increment()
    ledger.reset()
    assert ledger.read() == 0


def test_garbage_file_is_a_storage_error(ledger):
    os.makedirs(os.path.dirname(ledger.path), exist_ok=True)
    with open(ledger.path, 'w', encoding='ascii') as fh:
        fh.write('twelve')
    with pytest.raises(StorageError):
        ledger.read()
    with pytest.raises(StorageError):
        ledger.increment()


def test_surrounding_whitespace_is_tolerated(ledger):
    os.makedirs(os.path.dirname(ledger.path), exist_ok=True)
    with open(ledger.path, 'w', encoding='ascii') as fh:
        fh.write('41\n')
    assert ledger.increment() == 42


@pytest.mark.parametrize('n', [1, 10, 1000])
def test_concurrent_increments_lose_nothing(ledger, n):
    with ThreadPoolExecutor(max_workers=32) as pool:
        results = list(pool.map(lambda _: ledger.increment(), range(n)))
    assert ledger.read() == n
    # every caller saw a distinct new value
    assert sorted(results) == list(range(1, n + 1))


def test_reads_during_increments_are_never_torn(ledger):
    stop = threading.Event()
    observed = []
    errors = []

    def reader():
        while not stop.is_set():
            try:
                observed.append(ledger.read())
            except StorageError as exc:
                errors.append(exc)

    t = threading.Thread(target=reader)
    t.start()
    try:
        with ThreadPoolExecutor(max_workers=16) as pool:
            list(pool.map(lambda _: ledger.increment(), range(300)))
    finally:
        stop.set()
        t.join()
    assert errors == []
    assert all(0 <= v <= 300 for v in observed)
    assert ledger.read() == 300


def test_increment_logs_under_app_logger(ledger, caplog):
    with caplog.at_level(logging.INFO, logger='delfos'):
        ledger.increment('a@x.com', 's1')
    records = [r for r in caplog.records if r.name.startswith('delfos.')]
    assert any(r.getMessage() == '[winner] new winner #1: a@x.com (session: s1)' for r in records)
