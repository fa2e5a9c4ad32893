"""Clinic walk-in queue service.

The queue core lives in `clinic_queue.service.queue_engine`; the FastAPI app in
`clinic_queue.main` is a thin collaborator on top of it.
"""
from importlib.metadata import PackageNotFoundError, version

try:  # Resolves once the project is installed; else default.
    __version__ = version("clinic-queue")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
