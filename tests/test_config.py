import pytest

from clinic_queue.config import (
    DEFAULT_NUMBER_RETRIES,
    get_cors_origins_from_env,
    get_number_retries_from_env,
)
from clinic_queue.service.queue_engine import QueueEngine


def test_number_retries_default(monkeypatch):
    monkeypatch.delenv("QUEUE_NUMBER_RETRIES", raising=False)
    assert get_number_retries_from_env() == DEFAULT_NUMBER_RETRIES


def test_number_retries_from_env_feeds_engine(monkeypatch):
    monkeypatch.setenv("QUEUE_NUMBER_RETRIES", "9")
    assert QueueEngine().number_retries == 9


@pytest.mark.parametrize("raw", ["zero", "0", "-3"])
def test_number_retries_rejects_garbage(monkeypatch, raw):
    monkeypatch.setenv("QUEUE_NUMBER_RETRIES", raw)
    with pytest.raises(ValueError):
        get_number_retries_from_env()


def test_cors_origins(monkeypatch):
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    assert get_cors_origins_from_env() == ["http://localhost:3000", "http://localhost:5000"]
    monkeypatch.setenv("CORS_ORIGINS", " https://clinic.example , ,http://localhost:8080")
    assert get_cors_origins_from_env() == ["https://clinic.example", "http://localhost:8080"]
