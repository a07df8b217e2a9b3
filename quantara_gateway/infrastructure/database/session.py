"""Database session management with connection pooling"""

from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from quantara_gateway.config import settings


def build_engine(database_url: str):
    """SQLite gets a thread-shareable connection; servers get a recycled pool"""
    engine_kwargs: Dict[str, Any] = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        # Connection pool: max 20 connections, recycle after 1 hour to avoid stale connections
        engine_kwargs.update(pool_size=10, max_overflow=10, pool_recycle=3600)
    return create_engine(database_url, **engine_kwargs)


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
