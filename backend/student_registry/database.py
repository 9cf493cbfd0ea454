"""
Database engine and session management.

Uses SQLAlchemy for ORM operations. The engine is built from an explicit
Settings object by create_app() and kept on app.state; route handlers get
a per-request session through the get_db dependency.
"""

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session
from sqlalchemy.pool import NullPool

from student_registry.config import Settings


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def build_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine for the configured database.

    Connections are not pooled: each request opens its own connection
    and releases it when the session closes.
    """
    engine_kwargs = {"echo": settings.echo_sql, "poolclass": NullPool}

    if settings.is_sqlite():
        # FastAPI runs sync endpoints in a threadpool
        engine_kwargs["connect_args"] = {"check_same_thread": False}

    engine = create_engine(settings.sqlalchemy_url(), **engine_kwargs)

    if settings.is_sqlite():
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to `engine`."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """
    FastAPI dependency that provides a database session.

    Yields a session from the application's session factory and closes it
    once the request is finished, even if the handler raised.
    """
    db: Session = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def create_tables(engine: Engine):
    """Create all tables that do not exist yet."""
    # Import models so they are registered with Base.metadata
    from student_registry import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
