"""Engine, sessions and schema helpers for the relational store."""

from .session import Base, SessionLocal, create_tables, drop_tables, engine, get_db

__all__ = ["Base", "SessionLocal", "create_tables", "drop_tables", "engine", "get_db"]
