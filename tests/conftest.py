import os
import sys
import pytest
from fastapi.testclient import TestClient

# Ensure the project root (containing the `wordrush` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from wordrush.dictionary import Dictionary
from wordrush.game import Round, now_ms
from wordrush.main import create_app
from wordrush.store import MemoryGameStore


WORDS = [
    'master', 'stream', 'mast', 'team', 'teams', 'tame', 'mate', 'meat', 'steam',
    'cat', 'mat', 'art', 'arm', 'rat', 'sat', 'tar', 'ear', 'eat', 'rates', 'smart',
    'table', 'masters', 'at', 'me',
]

CODE = 'ABCDEF'


@pytest.fixture()
def dictionary():
    return Dictionary.from_words(WORDS)


@pytest.fixture()
def store():
    return MemoryGameStore()


@pytest.fixture()
def waiting_round(store):
    rnd = Round.new(CODE, 'MASTER', 60, now_ms())
    store.put(CODE, rnd.to_document())
    return rnd


@pytest.fixture()
def api_app(store, dictionary):
    return create_app(store=store, dictionary=dictionary, cleanup_interval=0)


@pytest.fixture()
def client(api_app):
    with TestClient(api_app) as test_client:
        yield test_client
