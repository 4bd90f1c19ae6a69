"""
Database initialization and seeding.
"""
import datetime
import logging

from sqlalchemy.orm import Session

from tracker.core.errors import TrackerError
from tracker.models.user import User
from tracker.schemas.test import CompletionCreate, TestCreate
from tracker.services.credential_service import CredentialService
from tracker.services.record_service import RecordService

logger = logging.getLogger(__name__)

DEMO_USERNAME = "demo"
DEMO_PASSWORD = "demo12345"


def init_db(db: Session) -> None:
    """
    Seed a demo user with a couple of recorded tests.

    Args:
        db: Database session
    """
    demo = db.query(User).filter(User.username == DEMO_USERNAME).first()
    if demo:
        logger.info("Demo user already exists")
        return

    try:
        user = CredentialService(db).create_user(DEMO_USERNAME, DEMO_PASSWORD)
        records = RecordService(db)
        maths = records.add_test(
            user.id,
            TestCreate(
                subject="Maths",
                topic="Statistics",
                date_or_id="Monday 3 June 2019",
                qualification_level="A Level",
                exam_board="Edexcel",
            ),
        )
        records.add_completion(
            maths.id,
            CompletionCreate(achieved_mark=61, total_marks=80, date=datetime.date(2023, 3, 14)),
        )
        records.add_completion(
            maths.id,
            CompletionCreate(achieved_mark=72, total_marks=80, date=datetime.date(2023, 4, 2)),
        )
        records.add_test(
            user.id,
            TestCreate(subject="English", topic="Shakespeare", date_or_id="Mock Set 1"),
        )
    except TrackerError as e:
        logger.error(f"Failed to seed demo data: {e}")
        raise
    logger.info("Demo user created successfully")
