"""HTTP surface of the queue: pydantic models and the token router."""
from .routes import router

__all__ = ["router"]
