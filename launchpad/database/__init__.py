from .connection import engine, SessionLocal, get_db

__all__ = ["engine", "SessionLocal", "get_db"]
