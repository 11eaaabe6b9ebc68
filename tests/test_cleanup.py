import logging

from wordrush.cleanup import RetentionSweeper, purge_expired
from wordrush.game import LOCKS, Round
from wordrush.store import MemoryGameStore

NOW = 1_700_000_000_000
DAY_MS = 24 * 60 * 60 * 1000


def seed(store, code, created_at):
    store.put(code, Round.new(code, 'MASTER', 60, created_at).to_document())


def test_purge_deletes_only_rounds_older_than_retention():
    store = MemoryGameStore()
    seed(store, 'AAAAAA', NOW - DAY_MS - 1)
    seed(store, 'BBBBBB', NOW - DAY_MS + 1)
    seed(store, 'CCCCCC', NOW)
    assert purge_expired(store, now=NOW) == ['AAAAAA']
    assert store.get('AAAAAA') is None
    assert store.get('BBBBBB') is not None
    assert len(store) == 2


def test_purge_custom_retention_and_lock_cleanup():
    store = MemoryGameStore()
    seed(store, 'DDDDDD', NOW - 61_000)
    LOCKS.for_code('DDDDDD')
    assert purge_expired(store, now=NOW, retention_seconds=60) == ['DDDDDD']
    assert 'DDDDDD' not in LOCKS._locks


def test_purge_logs_deletions(caplog):
    store = MemoryGameStore()
    seed(store, 'EEEEEE', 0)
    with caplog.at_level(logging.INFO, logger='wordrush.cleanup'):
        purge_expired(store, now=NOW)
    assert 'Deleted old game: EEEEEE' in caplog.text


def test_sweeper_run_once():
    store = MemoryGameStore()
    seed(store, 'FFFFFF', 0)
    sweeper = RetentionSweeper(store, interval=0)
    assert sweeper.run_once() == ['FFFFFF']


def test_sweeper_with_zero_interval_does_not_start():
    sweeper = RetentionSweeper(MemoryGameStore(), interval=0)
    sweeper.start()
    assert sweeper._thread is None
    sweeper.stop()


def test_sweeper_thread_starts_and_stops():
    sweeper = RetentionSweeper(MemoryGameStore(), interval=3600)
    sweeper.start()
    assert sweeper._thread is not None and sweeper._thread.daemon
    sweeper.stop()
    assert sweeper._thread is None
