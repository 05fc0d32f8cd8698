"""FastAPI routers acting as controllers."""

from . import analysis, session

__all__ = ["analysis", "session"]
