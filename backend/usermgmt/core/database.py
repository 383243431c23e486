from contextlib import contextmanager
from typing import Iterator
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from usermgmt.core.config import settings

# SQLite connections are shared across the request worker threads
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# Create database engine - manages connection pool
engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

# Create session factory - each request gets a new session
# autocommit=False: Changes require explicit commit
# autoflush=False: Nothing reaches the database before transaction() commits
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all database models
Base = declarative_base()


def get_db():
    """
    Dependency for getting database session.

    The session is closed after the request completes, even if the handler raised.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Scoped unit of work: commit when the block exits cleanly, roll back otherwise.

    The original exception is re-raised after the rollback.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
