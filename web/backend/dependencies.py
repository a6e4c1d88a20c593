#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

import uuid
from typing import Generator, Optional

from fastapi import Depends, Header
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from core.app_context import AppContext
from database.uow import Repositories
from .config import get_config, get_app_context
from .exceptions import MissingStudentIdentityException


class DatabaseManager:
    """Manages database connections and sessions."""

    def __init__(self, url: str):
        self.engine = create_engine(
            url,
            pool_pre_ping=True,  # Verify connections before using
            pool_size=10,
            max_overflow=20
        )
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

    def get_session(self) -> Generator[Session, None, None]:
        """
        Get a database session.

        Yields:
            Session: SQLAlchemy database session.
        """
        session = self.SessionLocal()
        try:
            yield session
        finally:
            session.close()


# Created on first request so importing the app never opens a connection pool
_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(get_config().database.url)
    return _db_manager


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session.

    Usage:
        @app.get("/endpoint")
        def my_endpoint(db: Session = Depends(get_db)):
            ...

    Yields:
        Session: Database session that will be automatically closed.
    """
    yield from get_db_manager().get_session()


def get_repositories(db: Session = Depends(get_db)) -> Repositories:
    return Repositories.for_session(db)


def get_context() -> AppContext:
    return get_app_context()


def get_current_student_id(
    x_student_id: Optional[str] = Header(default=None, alias="X-Student-Id")
) -> uuid.UUID:
    """Student identity forwarded by the surrounding application."""
    if not x_student_id:
        raise MissingStudentIdentityException("X-Student-Id header is required")
    try:
        return uuid.UUID(x_student_id)
    except ValueError:
        raise MissingStudentIdentityException(f"Invalid X-Student-Id: {x_student_id}")
