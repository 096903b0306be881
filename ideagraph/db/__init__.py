"""Database layer: async SQLAlchemy engine, ORM models and the interest repository."""

from ideagraph.db.engine import build_engine, close_engine, create_tables, get_engine, get_session_factory
from ideagraph.db.models import Base, InterestHistoryRow, InterestPinRow, InterestRow, PinRow
from ideagraph.db.repository import HistoryEntry, InterestRepository, UpsertResult

__all__ = [
    "Base",
    "HistoryEntry",
    "InterestHistoryRow",
    "InterestPinRow",
    "InterestRepository",
    "InterestRow",
    "PinRow",
    "UpsertResult",
    "build_engine",
    "close_engine",
    "create_tables",
    "get_engine",
    "get_session_factory",
]
