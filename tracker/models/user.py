"""
User model for authentication.
"""
from sqlalchemy import Column, String, UniqueConstraint
from sqlalchemy.orm import relationship

from tracker.core.security import generate_user_id
from tracker.db.base import Base


class User(Base):
    """User model."""

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("username", name="users_username_key"),)

    id = Column(String, primary_key=True, default=generate_user_id)
    username = Column(String, nullable=False)  # always lowercase
    hashed_password = Column(String, nullable=False)  # Argon2id

    # Relationships
    tests = relationship("Test", back_populates="owner", cascade="all, delete-orphan")
