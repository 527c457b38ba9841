import os
import sys
import random
import pytest

# `delfos` and `config` import from backend/ when the project is not installed
BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from delfos import create_app, socketio
from delfos.services.bank import DEFAULT_BANK_PATH, QuestionBank
from delfos.services.sessions import SessionStore
from delfos.services.winners import WinnerLedger


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    DATA_DIR = 'data'
    QUESTION_BANK_PATH = None
    DEFAULT_PROFILE = 'credit'
    QUESTIONS_PER_SAMPLE = 8
    CORS_ORIGINS = ['*']
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def flask_app(tmp_path):
    class _Config(TestConfig):
        DATA_DIR = str(tmp_path / 'data')

    application = create_app(_Config)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    ws = socketio.test_client(flask_app, namespace='/ws')
    yield ws
    if ws.is_connected('/ws'):
        ws.disconnect(namespace='/ws')


@pytest.fixture(scope='session')
def bank():
    return QuestionBank(DEFAULT_BANK_PATH)


@pytest.fixture()
def store(tmp_path):
    return SessionStore(str(tmp_path / 'sessions'))


@pytest.fixture()
def ledger(tmp_path):
    return WinnerLedger(str(tmp_path / 'ledger'))


@pytest.fixture()
def rng():
    return random.Random(1234)
