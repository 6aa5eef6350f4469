"""Core application components."""

from .config import Settings, settings
from .database import AsyncSessionLocal, engine, init_db, session_scope

__all__ = [
    "settings",
    "Settings",
    "engine",
    "AsyncSessionLocal",
    "session_scope",
    "init_db",
]
