from typing import Iterator

from sqlalchemy.orm import Session

from portal.backend.db.session import SessionLocal


def get_db() -> Iterator[Session]:
    """One session per request; tests swap this out for an in-memory engine."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
