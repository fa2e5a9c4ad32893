"""Pure domain pieces: errors, statuses, token records.

Free of FastAPI/HTTP and storage concerns so the engine, the stores and the
smoke runner can all share them.
"""
__all__ = ["errors", "status", "tokens"]
