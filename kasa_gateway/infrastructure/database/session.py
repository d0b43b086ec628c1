"""Database session management and the single-commit transaction helper"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session

from kasa_gateway.config import settings
from kasa_gateway.domain.exceptions import PersistenceError


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # Local development database shared with the test client thread
        return {"connect_args": {"check_same_thread": False}}
    # Connection pool: max 20 connections, recycle after 1 hour to avoid stale connections
    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 10,
        "pool_recycle": 3600,
    }


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Commit every write made inside the block together, or none of them.

    IntegrityError is re-raised untouched so callers can turn uniqueness
    violations into domain conflicts; any other store failure becomes
    PersistenceError.
    """
    try:
        yield db
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError("Database operation failed") from e
    except Exception:
        db.rollback()
        raise
