import pytest
from fastapi.testclient import TestClient

from clinic_queue.main import create_app
from clinic_queue.service.queue_engine import QueueEngine, reset_engine
from clinic_queue.store import InMemoryTokenStore


@pytest.fixture
def store():
    return InMemoryTokenStore()


@pytest.fixture
def engine(store):
    return QueueEngine(store, number_retries=5)


@pytest.fixture
def client(engine):
    app = create_app(engine)
    with TestClient(app) as c:
        yield c
    reset_engine()
