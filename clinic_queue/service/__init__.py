"""Use-cases on top of the domain and the token store."""
from .queue_engine import QueueEngine, QueueSnapshot, get_engine, reset_engine

__all__ = ["QueueEngine", "QueueSnapshot", "get_engine", "reset_engine"]
