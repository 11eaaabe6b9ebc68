import pytest

from wordrush.db import SqlGameStore, sqlite_url
from wordrush.game import Round
from wordrush.store import FileGameStore, MemoryGameStore, RoundLocks

NOW = 1_700_000_000_000


@pytest.fixture(params=['memory', 'file', 'sql'])
def any_store(request, tmp_path):
    if request.param == 'memory':
        yield MemoryGameStore()
    elif request.param == 'file':
        yield FileGameStore(tmp_path / 'games')
    else:
        sql_store = SqlGameStore(sqlite_url(tmp_path / 'rounds.db'))
        yield sql_store
        sql_store.dispose()


def make_doc(code, created_at=NOW):
    rnd = Round.new(code, 'MASTER', 60, created_at)
    rnd.join('Alice', created_at)
    return rnd.to_document()


def test_get_missing_returns_none(any_store):
    assert any_store.get('ABCDEF') is None
    assert not any_store.exists('ABCDEF')


def test_put_then_get(any_store):
    doc = make_doc('ABCDEF')
    any_store.put('ABCDEF', doc)
    assert any_store.get('ABCDEF') == doc
    assert any_store.exists('ABCDEF')


def test_put_replaces(any_store):
    doc = make_doc('ABCDEF')
    any_store.put('ABCDEF', doc)
    updated = doc.model_copy(update={'status': 'active', 'start_time': NOW + 5})
    any_store.put('ABCDEF', updated)
    assert any_store.get('ABCDEF').status == 'active'
    assert any_store.get('ABCDEF').start_time == NOW + 5


def test_returned_documents_are_independent_copies(any_store):
    any_store.put('ABCDEF', make_doc('ABCDEF'))
    first = any_store.get('ABCDEF')
    first.players.clear()
    assert len(any_store.get('ABCDEF').players) == 1


def test_delete(any_store):
    any_store.put('ABCDEF', make_doc('ABCDEF'))
    assert any_store.delete('ABCDEF')
    assert any_store.get('ABCDEF') is None
    assert not any_store.delete('ABCDEF')


def test_expired_codes(any_store):
    any_store.put('AAAAAA', make_doc('AAAAAA', created_at=NOW - 10_000))
    any_store.put('BBBBBB', make_doc('BBBBBB', created_at=NOW))
    assert any_store.expired_codes(NOW) == ['AAAAAA']
    assert sorted(any_store.expired_codes(NOW + 1)) == ['AAAAAA', 'BBBBBB']


def test_file_store_writes_camel_case_json(tmp_path):
    store = FileGameStore(tmp_path / 'games')
    store.put('ABCDEF', make_doc('ABCDEF'))
    text = (tmp_path / 'games' / 'ABCDEF.json').read_text(encoding='utf-8')
    assert '"createdAt"' in text
    assert '"startTime": null' in text


def test_file_store_rejects_path_like_codes(tmp_path):
    store = FileGameStore(tmp_path / 'games')
    assert store.get('../secret') is None
    assert not store.delete('../secret')
    with pytest.raises(ValueError):
        store.put('../secret', make_doc('ABCDEF'))


def test_file_store_skips_unreadable_files_when_sweeping(tmp_path):
    store = FileGameStore(tmp_path / 'games')
    store.put('AAAAAA', make_doc('AAAAAA', created_at=NOW - 10_000))
    (tmp_path / 'games' / 'BROKEN.json').write_text('{"code": "BROKEN"}', encoding='utf-8')
    assert store.expired_codes(NOW) == ['AAAAAA']


def test_round_locks_are_per_code():
    locks = RoundLocks()
    assert locks.for_code('AAAAAA') is locks.for_code('AAAAAA')
    assert locks.for_code('AAAAAA') is not locks.for_code('BBBBBB')
    locks.discard('AAAAAA')
    assert len(locks) == 1


def test_round_locks_keep_held_locks():
    locks = RoundLocks()
    lock = locks.for_code('AAAAAA')
    with lock:
        assert not locks.discard('AAAAAA')
        assert locks.for_code('AAAAAA') is lock
    assert locks.discard('AAAAAA')
    assert locks.for_code('AAAAAA') is not lock
