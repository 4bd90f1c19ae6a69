"""
Dependency injection for FastAPI endpoints.
"""
from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from tracker.db.base import SessionLocal
from tracker.services.credential_service import CredentialService
from tracker.services.record_service import RecordService


def get_db() -> Generator:
    """
    Dependency for database session.

    Yields:
        Database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_credential_service(db: Session = Depends(get_db)) -> CredentialService:
    """Credential store bound to the request's session."""
    return CredentialService(db)


def get_record_service(db: Session = Depends(get_db)) -> RecordService:
    """Record store bound to the request's session."""
    return RecordService(db)
