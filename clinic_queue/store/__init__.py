"""Token storage collaborators for the queue engine."""
from .base import TokenStore
from .memory import InMemoryTokenStore

__all__ = ["TokenStore", "InMemoryTokenStore"]
