"""Backend package for the millionaire quiz host."""

from .config import BackendSettings, load_settings
from .engine import TurnEngine
from .ladder import DEFAULT_LADDER, PrizeLadder
from .session import Session, SessionOrchestrator, build_session, start_session
from .store import InMemoryResultStore, PostgresResultStore, ResultStore, create_store

__all__ = [
    "BackendSettings",
    "build_session",
    "create_store",
    "DEFAULT_LADDER",
    "InMemoryResultStore",
    "load_settings",
    "PostgresResultStore",
    "PrizeLadder",
    "ResultStore",
    "Session",
    "SessionOrchestrator",
    "start_session",
    "TurnEngine",
]
