"""
Database configuration and session management for the Nursery Storefront API.

The inventory table lives in the hosted Postgres database shared with the
dashboard; this module only opens sessions against it.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL

# Create SQLAlchemy engine
# Create SessionLocal class for database sessions
# Base class for declarative models
engine       = create_engine(DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base         = declarative_base()

def get_db():
    """
    Request-scoped session on the dashboard-owned inventory table.

    The API only reads through it: nothing is committed, and whatever a
    handler left pending is rolled back before the session closes.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()
