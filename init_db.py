"""
Create the tables and seed the demo user.

Run once against a fresh database: ``python init_db.py``.
"""
import logging

from tracker.db.base import engine, SessionLocal
from tracker.db.init_db import init_db
from tracker.models import Base

logger = logging.getLogger(__name__)


def init() -> None:
    logger.info(f"Creating tables on {engine.url!r}")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        init_db(db)
    finally:
        db.close()
    logger.info("Database ready")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init()
