"""
Account creation and password authentication.
"""
import logging

from passlib.exc import MissingBackendError, PasswordSizeError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tracker.core.errors import TrackerError, database_error, hashing_error
from tracker.core.security import get_password_hash, verify_password
from tracker.models.user import User
from tracker.schemas.error import DatabaseError, InvalidPassword, NotFound, UniqueViolation
from tracker.schemas.protocol import User as UserSchema

logger = logging.getLogger(__name__)


def normalize_username(username: str) -> str:
    """Case-fold a username for storage and lookup."""
    return username.lower()


class CredentialService:
    """Hashes, stores and verifies user credentials."""

    def __init__(self, db: Session):
        self.db = db

    def _hash(self, password: str) -> str:
        try:
            return get_password_hash(password)
        except (MissingBackendError, ValueError, TypeError) as e:
            logger.error(f"Failed to hash password: {e}")
            raise TrackerError(hashing_error(e)) from e

    def create_user(self, username: str, password: str) -> UserSchema:
        """
        Create a new user and return its public projection.

        Args:
            username: Requested username, case-folded before storage
            password: Plaintext password

        Returns:
            The created user

        Raises:
            TrackerError: If the username is taken, hashing fails or the
                database is unreachable
        """
        username = normalize_username(username)

        try:
            existing = self.db.query(User.id).filter(User.username == username).first()
        except SQLAlchemyError as e:
            raise TrackerError(database_error(e)) from e
        if existing:
            logger.info(f"Username {username!r} already taken")
            raise TrackerError(
                DatabaseError(
                    error=UniqueViolation(
                        message='duplicate key value violates unique constraint "users_username_key"',
                        details=f"Key (username)=({username}) already exists.",
                    )
                )
            )

        user = User(username=username, hashed_password=self._hash(password))
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError as e:
            # Lost a race with a concurrent insert of the same username
            self.db.rollback()
            logger.info(f"Concurrent creation of {username!r} rejected by the database")
            raise TrackerError(database_error(e)) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create user {username!r}: {e}")
            raise TrackerError(database_error(e)) from e

        logger.info(f"Created user {user.id}")
        return UserSchema.model_validate(user)

    def authenticate(self, username: str, password: str) -> UserSchema:
        """
        Check a username and password against the stored hash.

        Raises:
            TrackerError: ``NotFound`` for an unknown username,
                ``InvalidPassword`` for a wrong password
        """
        username = normalize_username(username)

        try:
            user = self.db.query(User).filter(User.username == username).first()
        except SQLAlchemyError as e:
            raise TrackerError(database_error(e)) from e
        if user is None:
            logger.info(f"No user named {username!r}")
            raise TrackerError(DatabaseError(error=NotFound()))

        try:
            valid = verify_password(password, user.hashed_password)  # type: ignore
        except PasswordSizeError:
            # Too long to have been accepted by create_user, so it cannot match
            logger.info(f"Oversized password for {user.id}")
            raise TrackerError(InvalidPassword())
        except (MissingBackendError, ValueError, TypeError) as e:
            logger.error(f"Stored hash for {user.id} could not be verified: {e}")
            raise TrackerError(hashing_error(e)) from e

        if not valid:
            logger.info(f"Invalid password for {user.id}")
            raise TrackerError(InvalidPassword())

        return UserSchema.model_validate(user)
