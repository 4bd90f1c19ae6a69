"""
Querying and inserting tests and completions.
"""
import logging
from typing import Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tracker.core.errors import TrackerError, database_error
from tracker.models.test import Completion, Test
from tracker.schemas.protocol import CompletionData, TestAndCompletions, TestData
from tracker.schemas.test import CompletionCreate, TestCreate

logger = logging.getLogger(__name__)


class RecordService:
    """Reads and writes a user's tests and their completions."""

    def __init__(self, db: Session):
        self.db = db

    def tests_and_completions_for_user(self, user_id: str) -> List[TestAndCompletions]:
        """
        Find every test the user owns along with all of its completions.

        Rows are grouped by the test's primary key, so two tests with
        identical fields stay separate. Tests with no completions are
        returned with an empty list.

        Args:
            user_id: The owning user's ID

        Returns:
            One entry per test, in no particular order

        Raises:
            TrackerError: If the database query fails
        """
        try:
            rows = (
                self.db.query(Test, Completion)
                .outerjoin(Completion, Completion.test_id == Test.id)
                .filter(Test.user_id == user_id)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to load tests for {user_id}: {e}")
            raise TrackerError(database_error(e)) from e

        grouped: Dict[int, TestAndCompletions] = {}
        for test, completion in rows:
            entry = grouped.get(test.id)
            if entry is None:
                entry = TestAndCompletions(test=TestData.model_validate(test))
                grouped[test.id] = entry
            if completion is not None:
                entry.completions.append(CompletionData.model_validate(completion))

        logger.debug(f"Loaded {len(grouped)} tests from {len(rows)} rows for {user_id}")
        return list(grouped.values())

    def add_test(self, user_id: str, test_in: TestCreate) -> TestData:
        """Record a new test for the user."""
        test = Test(user_id=user_id, **test_in.model_dump())
        try:
            self.db.add(test)
            self.db.commit()
            self.db.refresh(test)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise TrackerError(database_error(e)) from e
        return TestData.model_validate(test)

    def add_completion(self, test_id: int, completion_in: CompletionCreate) -> CompletionData:
        """Record a new completion of an existing test."""
        completion = Completion(test_id=test_id, **completion_in.model_dump())
        try:
            self.db.add(completion)
            self.db.commit()
            self.db.refresh(completion)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise TrackerError(database_error(e)) from e
        return CompletionData.model_validate(completion)
