"""
Test and completion models for recorded past papers.
"""
from sqlalchemy import Column, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from tracker.db.base import Base


class Test(Base):
    """A past paper or mock that a user has sat."""

    __tablename__ = "tests"

    id = Column(Integer, primary_key=True, index=True)
    subject = Column(String, nullable=False)  # Maths, English, Science, etc.
    topic = Column(String, nullable=True)  # Statistics, Shakespeare, etc.
    date_or_id = Column(String, nullable=False)  # Monday 3 June 2019, Mock Set 1, etc.
    qualification_level = Column(String, nullable=True)  # GCSE, A Level, etc.
    exam_board = Column(String, nullable=True)  # Edexcel, AQA, OCR, etc.
    paper_link = Column(String, nullable=True)
    mark_scheme_link = Column(String, nullable=True)
    comments = Column(Text, nullable=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    owner = relationship("User", back_populates="tests")
    completions = relationship("Completion", back_populates="test", cascade="all, delete-orphan")


class Completion(Base):
    """One attempt at a test."""

    __tablename__ = "completions"

    id = Column(Integer, primary_key=True, index=True)
    achieved_mark = Column(Integer, nullable=False)
    total_marks = Column(Integer, nullable=False)
    date = Column(Date, nullable=True)
    comments = Column(Text, nullable=True)
    test_id = Column(Integer, ForeignKey("tests.id"), nullable=False, index=True)

    # Relationships
    test = relationship("Test", back_populates="completions")
